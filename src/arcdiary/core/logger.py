"""Verbose logger for arcdiary.

Services (loader, coalescer, clusterer, extractor, stats) report their entry
points with log_call/log_result. Output goes to stderr so `--json` output on
stdout stays parseable. In web mode the same records are buffered for
`GET /api/logs`; log_debug lines (merges, suppressions, drift clusters) are
console-only.
"""

from typing import Any, Optional
from rich.console import Console

# stderr; stdout carries command output
_console = Console(stderr=True)
_verbose = False
_web_mode = False


def set_verbose(enabled: bool) -> None:
    """Enable or disable verbose mode."""
    global _verbose
    _verbose = enabled


def is_verbose() -> bool:
    """Return whether verbose mode is on."""
    return _verbose


def set_web_mode(enabled: bool) -> None:
    """Enable web mode - records also go to the web log buffer."""
    global _web_mode
    _web_mode = enabled


def _web_log(level: str, message: str, data: Optional[dict] = None) -> None:
    """Append to the web buffer when web mode is active."""
    if not _web_mode:
        return
    try:
        from arcdiary.web.state import log_buffer
        log_buffer.add(level, message, data)
    except ImportError:
        pass


def log_call(service: str, method: str, **kwargs: Any) -> None:
    """Log a service call with its parameters.

    Args:
        service: Service name (e.g. "TimelineCoalescer", "DiaryPipeline")
        method: Method name (e.g. "coalesce", "process_day")
        **kwargs: Call parameters
    """
    params = []
    for key, value in kwargs.items():
        if value is None:
            continue
        str_value = str(value)
        if len(str_value) > 50:
            str_value = str_value[:47] + "..."
        params.append(f"{key}={str_value}")

    params_str = ", ".join(params) if params else ""
    message = f"→ {service}.{method}({params_str})"

    _web_log("call", message, {"service": service, "method": method, "params": {k: str(v) for k, v in kwargs.items()}})

    if _verbose:
        _console.print(f"  [dim]{message}[/dim]")


def log_result(service: str, method: str, result: Any) -> None:
    """Log the result of a service call.

    Args:
        service: Service name
        method: Method name
        result: Call result
    """
    str_result = str(result)
    if len(str_result) > 80:
        str_result = str_result[:77] + "..."

    message = f"← {service}.{method} = {str_result}"

    _web_log("result", message, {"service": service, "method": method, "result": str(result)})

    if _verbose:
        _console.print(f"  [dim]{message}[/dim]")


def log_info(message: str) -> None:
    """Log an informational message."""
    _web_log("info", message)

    if _verbose:
        _console.print(f"  [dim]{message}[/dim]")


def log_debug(message: str) -> None:
    """Log a coalescing or clustering decision.

    Printed only in verbose mode and never added to the web buffer.
    """
    if _verbose:
        _console.print(f"    [dim italic]{message}[/dim italic]")


def log_warning(message: str) -> None:
    """Log a warning."""
    _web_log("warning", message)

    # Warnings always go to the console
    _console.print(f"  [yellow]⚠ {message}[/yellow]")
