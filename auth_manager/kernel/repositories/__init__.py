from auth_manager.kernel.repositories.user_repository import SqlAlchemyUserStore, UserStore

__all__ = ["SqlAlchemyUserStore", "UserStore"]
