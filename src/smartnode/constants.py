"""Named constants for contract names, methods and unit scales.

Contract and method names must match the deployed Rocket Pool ABIs exactly.
"""

from __future__ import annotations

# =============================================================================
# Units
# =============================================================================

# Number of decimal places in a wei-denominated fixed-point value (ETH and RPL).
TOKEN_DECIMALS: int = 18

# =============================================================================
# Contract names (registry keys and ABI file stems)
# =============================================================================

ROCKET_NODE_CONTRACT: str = "rocketNodeContract"
ROCKET_NODE_SETTINGS: str = "rocketNodeSettings"

# =============================================================================
# Node contract methods
# =============================================================================

GET_BALANCE_ETH = "getBalanceETH"
GET_BALANCE_RPL = "getBalanceRPL"
GET_HAS_DEPOSIT_RESERVATION = "getHasDepositReservation"
GET_DEPOSIT_RESERVE_DURATION_ID = "getDepositReserveDurationID"
GET_DEPOSIT_RESERVE_ETHER_REQUIRED = "getDepositReserveEtherRequired"
GET_DEPOSIT_RESERVE_RPL_REQUIRED = "getDepositReserveRPLRequired"
GET_DEPOSIT_RESERVED_TIME = "getDepositReservedTime"

# =============================================================================
# Node settings contract methods
# =============================================================================

GET_DEPOSIT_RESERVATION_TIME = "getDepositReservationTime"

# =============================================================================
# Defaults
# =============================================================================

DEFAULT_RPC_URL: str = "http://localhost:8545"

# Deadline for one whole aggregation (all fields), in seconds.
DEFAULT_AGGREGATION_TIMEOUT: float = 30.0

# Transport-level retry attempts for a single contract call.
DEFAULT_MAX_RETRIES: int = 3
