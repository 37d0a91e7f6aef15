"""Minimal ABI for the MyMarket contract: only the functions settlement touches."""


def _view(name: str, output_type: str) -> dict:
    return {
        "type": "function",
        "name": name,
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": output_type}],
    }


MY_MARKET_ABI: list[dict] = [
    _view("hasExpired", "bool"),
    _view("isSettled", "bool"),
    _view("timeUntilExpiry", "uint256"),
    _view("STRIKE_PRICE", "uint256"),
    _view("settlementPrice", "uint256"),
    _view("settledAboveStrike", "bool"),
    _view("answerTimestamp", "uint256"),
    {
        "type": "function",
        "name": "settleMarket",
        "stateMutability": "nonpayable",
        "inputs": [],
        "outputs": [],
    },
]
