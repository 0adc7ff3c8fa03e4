class PasswordMixin:
    """Holds a new plaintext password outside any mapped column.

    The value is consumed by ``CredentialStore.prepare_for_persistence``.
    """

    _pending_password = None

    def set_password(self, plaintext: str) -> None:
        self._pending_password = plaintext

    @property
    def has_pending_password(self) -> bool:
        return self._pending_password is not None

    def take_pending_password(self):
        pending, self._pending_password = self._pending_password, None
        return pending
