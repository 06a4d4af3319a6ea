"""Order construction and request signing for the Polymarket CLOB."""

from clob_signing.signing.amounts import (
    calculate_order_amounts,
    compute_legs,
    get_round_config,
    round_decimal,
    to_base_units,
    validate_price,
)
from clob_signing.signing.eip712 import (
    get_exchange_address,
    hash_typed_data,
    recover_signer,
    sign_clob_auth,
    sign_order,
)
from clob_signing.signing.exceptions import (
    ClobSigningError,
    HashingError,
    InvalidKeyMaterialError,
    InvalidPriceError,
    InvalidSecretError,
    RandomnessError,
    SigningError,
    UnsupportedChainError,
)
from clob_signing.signing.headers import (
    create_l1_headers,
    create_l2_headers,
    inject_builder_headers,
)
from clob_signing.signing.hmac_signer import build_hmac_signature
from clob_signing.signing.keys import derive_address, is_valid_address
from clob_signing.signing.models import (
    ApiKeyCreds,
    BuilderApiKey,
    Chain,
    OrderType,
    RoundConfig,
    Side,
    SignatureType,
    SignedOrder,
    TickSize,
    UnsignedOrder,
    UserMarketOrder,
    UserOrder,
    order_to_post_payload,
)
from clob_signing.signing.order_builder import OrderBuilder, generate_salt

__all__ = [
    "ApiKeyCreds",
    "BuilderApiKey",
    "Chain",
    "ClobSigningError",
    "HashingError",
    "InvalidKeyMaterialError",
    "InvalidPriceError",
    "InvalidSecretError",
    "OrderBuilder",
    "OrderType",
    "RandomnessError",
    "RoundConfig",
    "Side",
    "SignatureType",
    "SignedOrder",
    "SigningError",
    "TickSize",
    "UnsignedOrder",
    "UnsupportedChainError",
    "UserMarketOrder",
    "UserOrder",
    "build_hmac_signature",
    "calculate_order_amounts",
    "compute_legs",
    "create_l1_headers",
    "create_l2_headers",
    "derive_address",
    "generate_salt",
    "get_exchange_address",
    "get_round_config",
    "hash_typed_data",
    "inject_builder_headers",
    "is_valid_address",
    "order_to_post_payload",
    "recover_signer",
    "round_decimal",
    "sign_clob_auth",
    "sign_order",
    "to_base_units",
    "validate_price",
]
