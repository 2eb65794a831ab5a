"""
Exception types raised by the disposition services.

Routes turn these into JSON error bodies; nothing here knows about HTTP.
"""


class DispositionError(Exception):
    """Base class for disposition routing and catalog failures."""


class UnknownActionError(DispositionError):
    def __init__(self, action=None):
        self.action = action
        super().__init__('Unknown action')


class InvalidRequestError(DispositionError):
    """Request body is missing a required field or carries a bad value."""


class LeadNotFoundError(DispositionError):
    def __init__(self, lead_id):
        self.lead_id = lead_id
        super().__init__(f'Lead not found: {lead_id}')


class FunctionInvocationError(DispositionError):
    """A collaborator function answered with an error or could not be reached."""
    def __init__(self, function, message, status_code=None):
        self.function = function
        self.status_code = status_code
        super().__init__(f'{function}: {message}')
