"""Minimal contract ABIs used by the ledger clients.

Only the functions and events the facilitator touches are declared.
"""

from typing import Any, Dict, List, Sequence, Tuple


def _params(params: Sequence[Tuple[str, str]]) -> List[Dict[str, Any]]:
    return [{"name": name, "type": type_} for name, type_ in params]


def _function(
    name: str,
    inputs: Sequence[Tuple[str, str]] = (),
    outputs: Sequence[Tuple[str, str]] = (),
    state_mutability: str = "view",
) -> Dict[str, Any]:
    return {
        "type": "function",
        "name": name,
        "inputs": _params(inputs),
        "outputs": _params(outputs),
        "stateMutability": state_mutability,
    }


def _event(name: str, inputs: Sequence[Tuple[str, str, bool]]) -> Dict[str, Any]:
    return {
        "type": "event",
        "name": name,
        "anonymous": False,
        "inputs": [
            {"name": arg, "type": type_, "indexed": indexed}
            for arg, type_, indexed in inputs
        ],
    }


EIP20_TOKEN_ABI: List[Dict[str, Any]] = [
    _function(
        "allowance",
        [("_owner", "address"), ("_spender", "address")],
        [("remaining", "uint256")],
    ),
    _function(
        "approve",
        [("_spender", "address"), ("_value", "uint256")],
        [("success", "bool")],
        "nonpayable",
    ),
]

STATE_ROOT_PROVIDER_ABI: List[Dict[str, Any]] = [
    _function("getLatestStateRootBlockHeight", outputs=[("height_", "uint256")]),
    _function(
        "getStateRoot",
        [("_blockHeight", "uint256")],
        [("stateRoot_", "bytes32")],
    ),
]

_PROVE_GATEWAY = _function(
    "proveGateway",
    [
        ("_blockHeight", "uint256"),
        ("_rlpAccount", "bytes"),
        ("_rlpParentNodes", "bytes"),
    ],
    [("success_", "bool")],
    "nonpayable",
)

_UNLOCK = [("_messageHash", "bytes32"), ("_unlockSecret", "bytes32")]

_COMMON: List[Dict[str, Any]] = [
    _function("getNonce", [("_account", "address")], [("nonce_", "uint256")]),
    _function("bounty", outputs=[("", "uint256")]),
    _function("stateRootProvider", outputs=[("", "address")]),
    _function(
        "getOutboxMessageStatus",
        [("_messageHash", "bytes32")],
        [("status_", "uint8")],
    ),
    _function(
        "getInboxMessageStatus",
        [("_messageHash", "bytes32")],
        [("status_", "uint8")],
    ),
    _PROVE_GATEWAY,
]

GATEWAY_ABI: List[Dict[str, Any]] = _COMMON + [
    _function("token", outputs=[("", "address")]),
    _function("baseToken", outputs=[("", "address")]),
    _function(
        "stake",
        [
            ("_amount", "uint256"),
            ("_beneficiary", "address"),
            ("_gasPrice", "uint256"),
            ("_gasLimit", "uint256"),
            ("_nonce", "uint256"),
            ("_hashLock", "bytes32"),
        ],
        [("messageHash_", "bytes32")],
        "nonpayable",
    ),
    _function(
        "confirmRedeemIntent",
        [
            ("_redeemer", "address"),
            ("_redeemerNonce", "uint256"),
            ("_beneficiary", "address"),
            ("_amount", "uint256"),
            ("_gasPrice", "uint256"),
            ("_gasLimit", "uint256"),
            ("_blockHeight", "uint256"),
            ("_hashLock", "bytes32"),
            ("_rlpParentNodes", "bytes"),
        ],
        [("messageHash_", "bytes32")],
        "nonpayable",
    ),
    _function(
        "progressStake",
        _UNLOCK,
        [("staker_", "address"), ("stakeAmount_", "uint256")],
        "nonpayable",
    ),
    _function(
        "progressUnstake",
        _UNLOCK,
        [("redeemAmount_", "uint256"), ("unstakeAmount_", "uint256"), ("rewardAmount_", "uint256")],
        "nonpayable",
    ),
    _event(
        "StakeIntentDeclared",
        [
            ("_messageHash", "bytes32", True),
            ("_staker", "address", False),
            ("_stakerNonce", "uint256", False),
            ("_beneficiary", "address", False),
            ("_amount", "uint256", False),
        ],
    ),
]

CO_GATEWAY_ABI: List[Dict[str, Any]] = _COMMON + [
    _function("utilityToken", outputs=[("", "address")]),
    _function(
        "redeem",
        [
            ("_amount", "uint256"),
            ("_beneficiary", "address"),
            ("_gasPrice", "uint256"),
            ("_gasLimit", "uint256"),
            ("_nonce", "uint256"),
            ("_hashLock", "bytes32"),
        ],
        [("messageHash_", "bytes32")],
        "payable",
    ),
    _function(
        "confirmStakeIntent",
        [
            ("_staker", "address"),
            ("_stakerNonce", "uint256"),
            ("_beneficiary", "address"),
            ("_amount", "uint256"),
            ("_gasPrice", "uint256"),
            ("_gasLimit", "uint256"),
            ("_hashLock", "bytes32"),
            ("_blockHeight", "uint256"),
            ("_rlpParentNodes", "bytes"),
        ],
        [("messageHash_", "bytes32")],
        "nonpayable",
    ),
    _function(
        "progressRedeem",
        _UNLOCK,
        [("redeemer_", "address"), ("redeemAmount_", "uint256")],
        "nonpayable",
    ),
    _function(
        "progressMint",
        _UNLOCK,
        [("beneficiary_", "address"), ("stakeAmount_", "uint256"), ("mintedAmount_", "uint256"), ("rewardAmount_", "uint256")],
        "nonpayable",
    ),
    _event(
        "RedeemIntentDeclared",
        [
            ("_messageHash", "bytes32", True),
            ("_redeemer", "address", False),
            ("_redeemerNonce", "uint256", False),
            ("_beneficiary", "address", False),
            ("_amount", "uint256", False),
        ],
    ),
]
