"""
Structured edits of a netplan document.

The document is loaded as a ruamel.yaml round-trip tree, so comments, key
order and untouched sections survive the edit. Only
network.ethernets.<iface>.addresses is ever written.
"""
from io import StringIO
from typing import Tuple

from ruamel.yaml import YAML
from ruamel.yaml.comments import CommentedMap, CommentedSeq
from ruamel.yaml.error import YAMLError

from core.errors import ApplyFailure

# What set_interface_address did to the tree
UPDATED_INTERFACE = "updated-interface"
ADDED_INTERFACE = "added-interface"
ADDED_ETHERNETS = "added-ethernets"


def _yaml() -> YAML:
    yaml = YAML()  # round-trip mode
    yaml.indent(mapping=2, sequence=4, offset=2)
    yaml.preserve_quotes = True
    return yaml


def _dump(doc) -> str:
    buf = StringIO()
    _yaml().dump(doc, buf)
    return buf.getvalue()


def _addresses(cidr: str) -> CommentedSeq:
    seq = CommentedSeq([cidr])
    seq.fa.set_flow_style()  # addresses: [10.0.0.5/24]
    return seq


def _interface_block(cidr: str) -> CommentedMap:
    block = CommentedMap()
    block["addresses"] = _addresses(cidr)
    return block


def new_document(iface: str, cidr: str) -> str:
    """Minimal version 2 document with a single ethernet entry."""
    ethernets = CommentedMap()
    ethernets[iface] = _interface_block(cidr)

    network = CommentedMap()
    network["version"] = 2
    network["ethernets"] = ethernets

    doc = CommentedMap()
    doc["network"] = network
    return _dump(doc)


def set_interface_address(text: str, iface: str, cidr: str) -> Tuple[str, str]:
    """
    Returns the edited document and which edit was made:
    - the interface exists: its addresses are replaced
    - 'ethernets' exists without the interface: the interface block is added
    - neither exists: 'ethernets' is inserted right after 'version'
    Raises ApplyFailure if the document cannot be parsed or has an unexpected shape.
    """
    try:
        doc = _yaml().load(text)
    except YAMLError as e:
        raise ApplyFailure(f"Invalid netplan document: {e}") from e

    if doc is None:
        return new_document(iface, cidr), ADDED_ETHERNETS
    if not isinstance(doc, dict):
        raise ApplyFailure("Netplan document is not a mapping")

    network = doc.get("network")
    if network is None:
        network = CommentedMap()
        network["version"] = 2
        doc["network"] = network
    elif not isinstance(network, dict):
        raise ApplyFailure("'network' is not a mapping")

    ethernets = network.get("ethernets")

    if isinstance(ethernets, dict) and iface in ethernets:
        block = ethernets[iface]
        if not isinstance(block, dict):
            # "eth0:" with no body
            block = CommentedMap()
            ethernets[iface] = block
        block["addresses"] = _addresses(cidr)
        return _dump(doc), UPDATED_INTERFACE

    if isinstance(ethernets, dict):
        ethernets[iface] = _interface_block(cidr)
        return _dump(doc), ADDED_INTERFACE

    if ethernets is not None:
        raise ApplyFailure("'network.ethernets' is not a mapping")

    ethernets = CommentedMap()
    ethernets[iface] = _interface_block(cidr)
    if "ethernets" in network:
        # "ethernets:" with no body
        network["ethernets"] = ethernets
        return _dump(doc), ADDED_INTERFACE

    keys = list(network.keys())
    position = keys.index("version") + 1 if "version" in keys else len(keys)
    network.insert(position, "ethernets", ethernets)
    return _dump(doc), ADDED_ETHERNETS
