"""
Service-layer exceptions
"""


class StoreError(Exception):
    """The backing store could not be read or written"""


class RegistrationError(Exception):
    """Base class for registration failures"""


class NotInvitedError(RegistrationError):
    def __init__(self, email: str):
        super().__init__("Your email is not on the invitation list for this event.")
        self.email = email


class RegistrationClosedError(RegistrationError):
    def __init__(self):
        super().__init__("Registration is currently closed.")


class GuestValidationError(RegistrationError):
    def __init__(self, errors):
        super().__init__("; ".join(errors))
        self.errors = errors


class CheckInError(Exception):
    """Base class for check-in failures"""


class NoTableAssignedError(CheckInError):
    def __init__(self, guest_name: str):
        super().__init__(f"{guest_name} does not have a table assignment. Please assign a table first.")
        self.guest_name = guest_name


class AlreadyCheckedInError(CheckInError):
    def __init__(self, guest_name: str):
        super().__init__(f"{guest_name} is already checked in.")
        self.guest_name = guest_name


class NotCheckedInError(CheckInError):
    def __init__(self, guest_name: str):
        super().__init__(f"{guest_name} is not currently checked in.")
        self.guest_name = guest_name
