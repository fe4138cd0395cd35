"""
Error types shared across the relay.
"""


class ContractViolation(RuntimeError):
    """
    Raised when decoded telemetry breaks an assumption the decoder is
    supposed to guarantee (player index in range, known safety car phase).

    These are not recoverable: the application logs them and exits.
    """
