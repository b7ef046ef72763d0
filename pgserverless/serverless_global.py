import threading
from typing import Optional

from .core.delay import Delay
from .core.retryer import Retryer
from .database.db_activity import ActivityDBHandler
from .helper.database import Database
from .helper.error import NotConnectedError
from .helper.logging import ServerlessLogger
from .model.config import ConnConfig, ConnConfigParams, new_default_config
from .model.credential import ConnCredential
from .model.state import ConnState


class ServerlessGlobalMixin:
    def __init__(self):
        # Overrides are kept until connect resolves them
        self.temp_config: Optional[ConnConfigParams] = None
        self.config: ConnConfig = new_default_config()
        self.conn_cred: ConnCredential = ConnCredential()
        self.state: ConnState = ConnState.DISCONNECTED

        # Guards the connection handle and its replacement
        self.conn_mutex: threading.RLock = threading.RLock()

        # Set up by ServerlessConn and connect
        self.delay: Delay
        self.retryer: Retryer
        self.logger: ServerlessLogger
        self.database: Database
        self.db_activity: ActivityDBHandler

        self.cancel_event: Optional[threading.Event] = None
        self.seed: Optional[int] = None

        # Cached max_connections of the server and its monotonic read time
        self.max_connections_cache: Optional[int] = None
        self.max_connections_cache_time: float = 0.0

    def _ensure_connected(self, operation: str) -> None:
        if self.state not in (ConnState.CONNECTED, ConnState.RETRYING):
            raise NotConnectedError(operation)
