"""
Physician Dashboard - composition root.

Builds the storage backend, auth session and persistence gateway, loads (or
seeds) the persisted collections exactly once, and only then constructs the
entity store and the selection coordinator that depend on them.
"""
import logging
from typing import Optional

from .core.auth import AuthSession
from .core.config import Settings, settings as default_settings
from .core.errors import AuthenticationError
from .services.analytics import AggregationEngine
from .services.coordinator import SelectionCoordinator
from .services.entity_store import EntityStore
from .services.kv_store import KeyValueStore, build_kv_store
from .services.persistence import PersistenceGateway

logger = logging.getLogger(__name__)


class Dashboard:
    """Wires the data core together and keeps it behind the sign-in gate."""

    def __init__(
        self,
        auth: AuthSession,
        store: EntityStore,
        coordinator: SelectionCoordinator,
        analytics: AggregationEngine,
    ):
        self.auth = auth
        self._store = store
        self.coordinator = coordinator
        self.analytics = analytics

    @property
    def store(self) -> EntityStore:
        if not self.auth.is_authenticated():
            raise AuthenticationError("Sign in to access patient data")
        return self._store

    def login(self, email: str, password: str, remember_me: bool = False):
        return self.auth.login(email, password, remember_me=remember_me)

    def logout(self) -> None:
        self.auth.logout()
        self.coordinator.reset()

    def overview(self):
        patients, examinations, files = self.store.snapshot()
        return self.analytics.overview(patients, examinations, files)


def create_dashboard(settings: Optional[Settings] = None, kv_store: Optional[KeyValueStore] = None) -> Dashboard:
    settings = settings or default_settings
    kv_store = kv_store or build_kv_store(settings)

    auth = AuthSession(kv_store, settings=settings)
    if settings.DEMO_USER_EMAIL and settings.DEMO_USER_PASSWORD:
        auth.ensure_user(settings.DEMO_USER_EMAIL, settings.DEMO_USER_PASSWORD, "John", "Smith")

    gateway = PersistenceGateway(kv_store, settings=settings)
    store = EntityStore.load(gateway, actor_name=auth.current_actor_name, settings=settings)
    coordinator = SelectionCoordinator(store)

    logger.info("%s %s ready", settings.APP_NAME, settings.VERSION)
    return Dashboard(auth, store, coordinator, AggregationEngine(settings))
