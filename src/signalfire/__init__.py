__all__ = [
    # Configuration
    "Settings",
    "load_settings",
    "build_endpoints",
    # Endpoints & fees
    "Endpoint",
    "FeeModel",
    "FeeMagnitudes",
    "LegacyFees",
    "DynamicFees",
    "select_fees",
    # Engine
    "FireEngine",
    "FireOutcome",
    "send_fire_transaction",
    "DRY_RUN_TX_HASH",
    # Confirmation
    "Confirmation",
    "ConfirmationState",
    "TransactionReceipt",
    # Keys
    "EncryptedKeyFile",
    "KeyStore",
    "is_valid_private_key",
    # Errors
    "SignalFireError",
    "RpcError",
    "TransportError",
    "RevertError",
    "DecodeError",
    "KeyStoreError",
    "KeyNotFoundError",
    "DecryptionFailedError",
    "ConfigError",
    "SubmissionExhaustedError",
]

from .chain.endpoints import Endpoint, FeeModel
from .chain.engine import DRY_RUN_TX_HASH, FireEngine, FireOutcome, send_fire_transaction
from .chain.fees import DynamicFees, FeeMagnitudes, LegacyFees, select_fees
from .chain.receipts import Confirmation, ConfirmationState, TransactionReceipt
from .config import Settings, build_endpoints, load_settings
from .errors import (
    ConfigError,
    DecodeError,
    DecryptionFailedError,
    KeyNotFoundError,
    KeyStoreError,
    RevertError,
    RpcError,
    SignalFireError,
    SubmissionExhaustedError,
    TransportError,
)
from .keys.keystore import EncryptedKeyFile, KeyStore, is_valid_private_key
