from __future__ import annotations


class ConversionError(Exception):
    """A db3 file could not be turned into a backup document."""


class NotFoundError(ConversionError):
    pass


class OpenError(ConversionError):
    pass


class MissingSchemaError(ConversionError):
    pass


class MissingLocalVersionError(ConversionError):
    pass


class UnsupportedSchemaError(ConversionError):
    pass


class CommandQueryError(ConversionError):
    pass


class CommandScanError(ConversionError):
    pass


class EncodeError(ConversionError):
    pass


class UploadError(Exception):
    """The uploaded file never reached the converter."""


class MultipartParseError(UploadError):
    pass


class FileRetrievalError(UploadError):
    pass


class UploadTooLargeError(UploadError):
    pass


class TempFileError(UploadError):
    pass


class CopyError(UploadError):
    pass
