"""Application service: Register User use case."""

from __future__ import annotations

from rental.domain.model.user import User
from rental.domain.repository.catalog_repository import UserRepository
from rental.domain.repository.transaction import TransactionManager


class RegisterUserHandler:

    def __init__(self, tx_manager: TransactionManager, user_repo: UserRepository) -> None:
        self._tx_manager = tx_manager
        self._user_repo = user_repo

    def handle(self, name: str) -> User:
        user = User.create(name)
        with self._tx_manager.begin() as tx:
            self._user_repo.save(tx, user)
            tx.commit()
        return user
