"""
Exceptions for the ShinCrypt engine
Every public operation raises one of these, so callers only need to catch ShinCryptError
"""


class ShinCryptError(Exception):
    # general container for errors
    pass


class PathError(ShinCryptError):
    # raised when the input is missing, unreadable or neither a file nor a directory
    pass


class CryptoError(ShinCryptError):
    # raised on key derivation failure, a malformed salt or an empty password
    pass


class UnsupportedMethodError(CryptoError):
    # raised when a header names an encryption method we do not know
    pass


class FormatError(ShinCryptError):
    # raised when a container is structurally invalid (header, text fields, archive)
    pass


class RecordTooLargeError(FormatError):
    # raised when name + path do not fit into the fixed-width header
    pass


class ContainerIOError(ShinCryptError):
    # raised on any read/write/create failure while handling a container
    pass
