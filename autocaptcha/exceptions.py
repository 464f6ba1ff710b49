#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# filename: exceptions.py

__all__ = [
    "AutoCaptchaException",
    "UserInputException",
    "ValidationError",
    "RecognizerError",
    "TransportError",
    "ParseError",
    "OperationFailedError",
    "OperationTimeoutError",
    "CancelledSkip",
]


class AutoCaptchaException(Exception):

    code = -1
    desc = "AutoCaptchaException"

    def __init__(self, *args, **kwargs):
        code = kwargs.pop("code", None)
        msg = kwargs.pop("msg", None)
        self.code = self.__class__.code if code is None else code
        self.msg = msg or (args[0] if args else self.__class__.desc)
        super().__init__(self.msg, *args[1:])

    def __str__(self):
        return str(self.msg)


class UserInputException(AutoCaptchaException, ValueError):
    code = 1000
    desc = "UserInputException"


class ValidationError(UserInputException):
    code = 1001
    desc = "ValidationError"


class RecognizerError(AutoCaptchaException):
    code = 2000
    desc = "RecognizerError"


class TransportError(RecognizerError):
    code = 2001
    desc = "TransportError"

    def __init__(self, *args, **kwargs):
        self.status_code = kwargs.pop("status_code", None)
        super().__init__(*args, **kwargs)


class ParseError(RecognizerError):
    code = 2002
    desc = "ParseError"


class OperationFailedError(AutoCaptchaException):
    code = 3000
    desc = "OperationFailedError"


class OperationTimeoutError(OperationFailedError):
    code = 3001
    desc = "OperationTimeoutError"


class CancelledSkip(AutoCaptchaException):
    """Raised inside a provider call once the ensemble has already decided."""
    code = 4000
    desc = "skipped"
