"""
Minimal JSON ABIs for the contracts the ledger adapter calls.

Only the functions, events and custom errors the workflows need are
listed.  Custom errors are included so revert data can be decoded into
a readable reason.
"""


def _fn(name, inputs, outputs=(), mutability="view"):
    return {
        "type": "function",
        "name": name,
        "stateMutability": mutability,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": n, "type": t} for n, t in outputs],
    }


def _error(name, inputs=()):
    return {
        "type": "error",
        "name": name,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
    }


ASSET_METADATA_TUPLE = {
    "name": "",
    "type": "tuple",
    "components": [
        {"name": "issuer", "type": "address"},
        {"name": "documentHash", "type": "string"},
        {"name": "totalValue", "type": "uint256"},
        {"name": "fractionCount", "type": "uint256"},
        {"name": "minFractionSize", "type": "uint256"},
        {"name": "mintTimestamp", "type": "uint256"},
        {"name": "oraclePriceAtMint", "type": "uint256"},
        {"name": "priceId", "type": "bytes32"},
        {"name": "verified", "type": "bool"},
    ],
}

RWA_FACTORY_ABI = [
    _fn(
        "mintRWAToken",
        [
            ("documentHash", "string"),
            ("totalValue", "uint256"),
            ("fractionCount", "uint256"),
            ("minFractionSize", "uint256"),
            ("priceId", "bytes32"),
            ("priceUpdateData", "bytes[]"),
            ("lockupWeeks", "uint256"),
        ],
        [("", "uint256")],
        mutability="payable",
    ),
    _fn(
        "purchaseFraction",
        [
            ("tokenId", "uint256"),
            ("amount", "uint256"),
            ("secret", "bytes32"),
            ("nullifier", "bytes32"),
        ],
        mutability="payable",
    ),
    {
        "type": "function",
        "name": "getAssetMetadata",
        "stateMutability": "view",
        "inputs": [{"name": "tokenId", "type": "uint256"}],
        "outputs": [ASSET_METADATA_TUPLE],
    },
    {
        "type": "event",
        "name": "AssetMinted",
        "anonymous": False,
        "inputs": [
            {"name": "tokenId", "type": "uint256", "indexed": True},
            {"name": "issuer", "type": "address", "indexed": True},
            {"name": "totalValue", "type": "uint256", "indexed": False},
            {"name": "fractionCount", "type": "uint256", "indexed": False},
            {"name": "priceId", "type": "bytes32", "indexed": False},
        ],
    },
    {
        "type": "event",
        "name": "FractionPurchased",
        "anonymous": False,
        "inputs": [
            {"name": "tokenId", "type": "uint256", "indexed": True},
            {"name": "buyer", "type": "address", "indexed": True},
            {"name": "amount", "type": "uint256", "indexed": False},
            {"name": "cost", "type": "uint256", "indexed": False},
        ],
    },
    _error("InsufficientFractionsAvailable", [("requested", "uint256"), ("available", "uint256")]),
    _error("InvalidProof"),
    _error("PaymentMismatch", [("expected", "uint256"), ("received", "uint256")]),
]

PYTH_ORACLE_READER_ABI = [
    _fn(
        "getLatestPrice",
        [("priceId", "bytes32")],
        [("price", "int64"), ("timestamp", "uint64")],
    ),
    _fn("getPriceAtMint", [("tokenId", "uint256")], [("", "int64")]),
    _fn("getUpdateFee", [("updateData", "bytes[]")], [("", "uint256")]),
    _fn("isSupportedFeed", [("priceId", "bytes32")], [("", "bool")]),
    _fn(
        "updatePrice",
        [("priceId", "bytes32"), ("priceUpdateData", "bytes[]")],
        mutability="payable",
    ),
]
