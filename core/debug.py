"""Debug and logging utilities for subsweep."""
import os
import logging


def is_debug_mode() -> bool:
    """Check if debug mode is enabled.
    
    Debug mode is enabled if:
    - SUBSWEEP_DEBUG environment variable is set to "1", "true", or "yes"
    
    Returns:
        True if debug mode is enabled
    """
    return os.environ.get("SUBSWEEP_DEBUG", "").lower() in ("1", "true", "yes")


def debug_print(message: str) -> None:
    """Print message only if debug mode is enabled.
    
    Args:
        message: Message to print
    """
    if is_debug_mode():
        print(message)


def configure_logging(verbose: bool = False) -> logging.Logger:
    """Configure the subsweep logger hierarchy.
    
    Every module logs through a child of the "subsweep" logger
    (subsweep.shodan, subsweep.http, ...), so one handler here covers them all.
    
    Args:
        verbose: If True, enable debug logging
        
    Returns:
        The root "subsweep" logger
    """
    debug_mode = verbose or is_debug_mode()
    if debug_mode:
        os.environ["SUBSWEEP_DEBUG"] = "1"
    
    logger = logging.getLogger("subsweep")
    logger.setLevel(logging.DEBUG if debug_mode else logging.INFO)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        logger.addHandler(handler)
    return logger
