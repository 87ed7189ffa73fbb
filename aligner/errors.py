class AlignmentError(Exception):
    pass


class InvalidCaptchaError(AlignmentError):
    """Raised when the captcha assets cannot be composited (no foreground, bad size, bad payload)."""


class SearchCancelled(AlignmentError):
    """Raised when the caller cancels an offset search before it finishes."""
