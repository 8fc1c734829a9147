# -*- coding: utf-8 -*-
#
# Copyright 2019 Klimaat

"""
Error and warning types.

Errors abort the call; warnings flag data that was recovered element-wise
(the affected values become missing) so the caller can decide to care.
"""


class SolaError(Exception):
    """
    Base class for all sola errors.
    """

    pass


class InvalidInput(SolaError, ValueError):
    """
    Out-of-domain or unparseable input.

    field names the failing input (e.g. "latitude"), value is the offending
    value when there is a single one.
    """

    def __init__(self, message, field=None, value=None):
        self.field = field
        self.value = value
        super(InvalidInput, self).__init__(message)


class MissingPrecondition(SolaError):
    """
    Raster lacks the coordinate or time metadata needed to compute anything.
    """

    def __init__(self, what, suggestion=None):
        self.what = what
        self.suggestion = suggestion
        message = "Missing raster metadata: %s" % what
        if suggestion:
            message += "\n%s" % suggestion
        super(MissingPrecondition, self).__init__(message)


class ConfigError(SolaError):
    """
    Invalid configuration value.
    """

    def __init__(self, parameter, reason):
        self.parameter = parameter
        self.reason = reason
        super(ConfigError, self).__init__(
            "Invalid configuration for '%s': %s" % (parameter, reason)
        )


class SolaWarning(UserWarning):
    pass


class NumericDateWarning(SolaWarning):
    """
    Numbers were reinterpreted as days since 1970-01-01.
    """

    pass


class TimeZoneWarning(SolaWarning):
    """
    Timezone-aware timestamps were reduced to their local calendar day.
    """

    pass


class InvalidDateWarning(SolaWarning):
    """
    Some (not all) dates could not be parsed and were set to missing.
    """

    pass


class MissingAttributeWarning(SolaWarning):
    """
    Some raster cells lack a latitude or some layers lack a date.
    """

    pass


class LayerWarning(SolaWarning):
    """
    A raster layer could not be computed and was left missing.
    """

    pass
