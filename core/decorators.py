from functools import wraps

from core.errors import ConfigureHostError
from core.models import Outcome, OutcomeStatus, SubTaskResult
from core.state import config as global_config
from utils.logger import logger, sys_logger


def automated_step(step_name: str):
    """
    Decorator for top-level reconciliation actions.
    1. Logs start and end to file.
    2. Turns expected errors (detection/apply failures) into a FAILED outcome.
    3. Catches unexpected exceptions so one broken action never stops the next one.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs) -> Outcome:
            sys_logger.info(f"START action='{step_name}'")

            try:
                outcome = func(*args, **kwargs)

            except ConfigureHostError as e:
                sys_logger.warning(f"FAILED action='{step_name}': {e}")
                outcome = Outcome(OutcomeStatus.FAILED, str(e))

            except Exception as e:
                # CATCH-ALL: If code explodes, catch it here.
                sys_logger.error(f"CRITICAL EXCEPTION in '{step_name}': {e}", exc_info=True)
                outcome = Outcome(OutcomeStatus.FAILED, f"System Error: {e}")

            sys_logger.info(f"END action='{step_name}' status='{outcome.status.value}'")
            return outcome

        return wrapper

    return decorator


def automated_substep(step_name: str):
    """
    Decorator for internal sub-steps.
    In VERBOSE mode, uses a spinner that transforms into the final result.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs) -> SubTaskResult:
            sys_logger.info(f"[SUB-START] '{step_name}'")
            indent = "   " * logger.indent_level

            result = None
            error_to_raise = None

            try:
                if global_config.VERBOSE:
                    with logger.console.status(f"{indent}[dim]🔹 {step_name}...[/dim]", spinner="dots"):
                        result = func(*args, **kwargs)
                else:
                    result = func(*args, **kwargs)

            except ConfigureHostError as e:
                error_to_raise = e

            except Exception as e:
                sys_logger.error(f"[SUB-CRASH] Exception in '{step_name}': {e}", exc_info=True)
                error_to_raise = e

            # Case 1: Exception
            if error_to_raise:
                if global_config.VERBOSE:
                    logger.console.print(f"{indent}[bold red]💥 {step_name}[/bold red]: {error_to_raise}")
                sys_logger.warning(f"[SUB-END] '{step_name}' -> FAIL ({error_to_raise})")
                return SubTaskResult(success=False, message=f"{step_name}: {error_to_raise}")

            # Case 2: Completed (logical success or fail)
            status_log = "OK" if result.success else "FAIL"
            log_msg = f"[SUB-END] '{step_name}' -> {status_log} ({result.message})"

            if result.success:
                sys_logger.info(log_msg)
                if global_config.VERBOSE:
                    logger.console.print(f"{indent}[green]✔[/green] [dim]{step_name}[/dim]")
            else:
                sys_logger.warning(log_msg)
                if global_config.VERBOSE:
                    logger.console.print(f"{indent}[red]✖ {step_name}[/red]: [dim]{result.message}[/dim]")

            return result

        return wrapper

    return decorator
