"""Game error taxonomy.

Every error carries a stable ``code`` tag so the HTTP layer can map it to a
status and message without looking at service internals. Services roll back
their transaction before raising.
"""


class GameError(RuntimeError):
    """Base class for expected, user-facing game errors."""

    code = "game_error"
    default_message = "Request could not be completed."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)


class InvalidInputError(GameError):
    """Request is malformed (missing email/area, bad values)."""

    code = "invalid_input"
    default_message = "Invalid input."


class InvalidAmountError(InvalidInputError):
    """Grant amount of zero."""

    code = "invalid_amount"
    default_message = "Grant amount must be a non-zero whole number."


class PlayerNotFoundError(GameError):
    """No player registered for the (email, area) pair."""

    code = "not_found"
    default_message = "Player not found."


class AlreadyCompletedError(GameError):
    """Player already reached the final square."""

    code = "already_completed"
    default_message = "Player has already completed the board."


class NoRollsRemainingError(GameError):
    """Player has used every granted roll."""

    code = "no_rolls_remaining"
    default_message = "No rolls left."


class NoGrantHistoryError(GameError):
    """No recorded grant to undo for the area."""

    code = "no_grant_history"
    default_message = "No grant action to undo."


class InvalidCredentialsError(GameError):
    """Admin username or password mismatch."""

    code = "invalid_credentials"
    default_message = "Invalid username or password."


class IncorrectCurrentPasswordError(GameError):
    """Current admin password did not verify during a password change."""

    code = "incorrect_current_password"
    default_message = "Current password is incorrect."
