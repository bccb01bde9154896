"""
Error taxonomy shared by all stores. Stores raise subclasses of these next to
the functions that detect the condition; the API maps each family to a status
code.
"""


class GroupCalError(Exception):
    pass


class NotFoundError(GroupCalError):
    """
    A referenced entity does not exist.
    """


class NotAllowedError(GroupCalError):
    """
    Authorization or ownership violation. Carries the offending actor and
    resource so that messages can be constructed from them.
    """

    def __init__(self, message: str, actor=None, resource=None):
        super().__init__(message)
        self.actor = actor
        self.resource = resource


class InvalidInputError(GroupCalError):
    """
    Malformed input, such as an unparseable date or identity.
    """


class UnauthenticatedError(GroupCalError):
    """
    No valid session could be resolved for the request.
    """
