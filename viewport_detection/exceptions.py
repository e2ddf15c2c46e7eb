"""Custom exceptions for viewport detection."""


class ViewportDetectionError(Exception):
    """Base exception for viewport detection errors."""

    def __init__(self, message: str, user_message: str | None = None):
        super().__init__(message)
        self.user_message = user_message or message


class OutOfBoundsClickError(ViewportDetectionError):
    """Click point lies outside the image."""

    def __init__(self, x: float, y: float, width: int, height: int):
        self.x = x
        self.y = y
        msg = f"Click coordinates ({x}, {y}) are outside image bounds ({width}x{height})"
        super().__init__(msg, "The click point is outside the image. Click on a photo in the scan.")


class ImageReadError(ViewportDetectionError):
    """Failed to read or decode input image."""

    def __init__(self, path: str, detail: str = ""):
        msg = f"Could not read image: {path}"
        if detail:
            msg = f"{msg} ({detail})"
        super().__init__(
            msg,
            "Could not read image file. The file may be corrupted or in an unsupported format.",
        )


class ImageEncodeError(ViewportDetectionError):
    """Failed to encode preview image."""

    def __init__(self, detail: str = ""):
        msg = f"Could not encode preview image: {detail}" if detail else "Could not encode preview image"
        super().__init__(msg, "Could not generate the preview image.")


class InvalidCropError(ViewportDetectionError):
    """Crop region collapsed to zero or negative size after clamping."""

    def __init__(self, width: float, height: float):
        super().__init__(
            f"Invalid crop size {width}x{height}",
            "The frame lies outside the image. Move or resize the frame and try again.",
        )
