"""Error kinds raised by the budgeting services.

Validation problems use ``django.core.exceptions.ValidationError`` and
missing rows use the model's ``DoesNotExist``; the classes below cover the
remaining kinds the API reports.
"""


class ConflictError(Exception):
    """The request clashes with existing state, e.g. a duplicate name or a
    protected system group."""


class PreconditionFailed(Exception):
    """A money movement was asked for more than the source holds."""


class AuthenticationFailed(Exception):
    pass
