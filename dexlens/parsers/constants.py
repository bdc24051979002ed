"""Solana program ids, reference tokens and address sets used by the parsers."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DexProgram:
    id: str
    name: str
    tags: tuple[str, ...]

    @property
    def is_amm(self) -> bool:
        return "amm" in self.tags


# Infrastructure programs
SYSTEM_PROGRAM_ID = "11111111111111111111111111111111"
COMPUTE_BUDGET_PROGRAM_ID = "ComputeBudget111111111111111111111111111111"
TOKEN_PROGRAM_ID = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"
TOKEN_2022_PROGRAM_ID = "TokenzQdBNbLqP5VEhdkAS6EPFLC1PHnBqCXEpPxuEb"
ASSOCIATED_TOKEN_PROGRAM_ID = "ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL"
METAPLEX_PROGRAM_ID = "metaqbxxUerdq28cj1RbAWkYQm3ybzjb6a8bt518x1s"
MEMO_PROGRAM_ID = "MemoSq4gqABAXKb96qnH8TysNcWxMyWCqXgDLGmfcHr"
MEMO_V1_PROGRAM_ID = "Memo1UhkJRfHyvLMcVucJwxXeuD728EqVDDwQDxFMNo"
PUMP_FEE_PROGRAM_ID = "pfeeUxB6jkeY1Hxd7CsFCAjcbHA9rWtchMGdZ6VojVZ"

TOKEN_PROGRAM_IDS = frozenset({TOKEN_PROGRAM_ID, TOKEN_2022_PROGRAM_ID})


class TOKENS:
    NATIVE = SYSTEM_PROGRAM_ID
    SOL = "So11111111111111111111111111111111111111112"
    USDC = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v"
    USDT = "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"
    USD1 = "USD1ttGY1N17NEEHLmELoaybftRBUSErhqYiQzvEmuB"
    USDG = "2u1tszSeqZ3qBWF3uNGPFc8TzMk2tdiwknnRMWGWjGWH"
    PYUSD = "2b1kV6DkPAnxd5ixfnxCpjxmKwqjjaYmCZfHsFu24GXo"
    EURC = "HzwqbKZw8HxMN6bF2yFZNrht3c2iXXzpKcFu7uBEDKtr"
    USDY = "A1KLoBrKBde8Ty9qtNQUtq3C2ortoC3u7twggz7sEto6"
    FDUSD = "9zNQRsGLjNKwCUU5Gq5LR8beUCPzQMVMqKAi3SSZh54u"


# Reference tokens: swap direction is BUY when one of these is spent
BASE_TOKENS: frozenset[str] = frozenset({
    TOKENS.NATIVE,
    TOKENS.SOL,
    TOKENS.USDC,
    TOKENS.USDT,
    TOKENS.USD1,
    TOKENS.USDG,
    TOKENS.PYUSD,
    TOKENS.EURC,
    TOKENS.USDY,
    TOKENS.FDUSD,
})

SOL_DECIMALS = 9


class DEX_PROGRAMS:
    # Aggregators / routers
    JUPITER = DexProgram("JUP6LkbZbjS1jKKwapdHNy74zcZ3tLUZoi5QNyVTaV4", "Jupiter", ("route",))
    JUPITER_DCA = DexProgram("DCA265Vj8a9CEuX1eb1LWRnDT7uK6q1xMipnNyatn23M", "JupiterDCA", ("route",))
    JUPITER_DCA_KEEPER1 = DexProgram("DCAKxn5PFNN1mBREPWGdk1RXg5aVH9rPErLfBFEi2Emb", "JupiterDcaKeeper1", ("route",))
    JUPITER_DCA_KEEPER2 = DexProgram("DCAKuApAuZtVNYLk3KTAVW9GLWVvPbnb5CxxRRmVgcTr", "JupiterDcaKeeper2", ("route",))
    JUPITER_DCA_KEEPER3 = DexProgram("DCAK36VfExkPdAkYUQg6ewgxyinvcEyPLyHjRbmveKFw", "JupiterDcaKeeper3", ("route",))
    JUPITER_VA = DexProgram("VALaaymxQh2mNy2trH9jUqHT1mTd8GoQqV6WRDQ8HSb", "JupiterVA", ("route",))
    JUPITER_LIMIT_ORDER = DexProgram("jupoNjAxXgZ4rjzxzPMP4oxduvQsQtZzyknqvzYNrNu", "JupiterLimitOrder", ("route",))
    JUPITER_LIMIT_ORDER_V2 = DexProgram("j1o2qRpjcyUwEvwtcfhEQefh773ZgjxcVRry7LDqg5X", "JupiterLimitOrderV2", ("route",))
    OKX_ROUTER = DexProgram("6m2CDdhRgxpH4WjvdzxAYbGxwdGUz5MziiL5jek2kBma", "OKX", ("route",))
    RAYDIUM_ROUTE = DexProgram("routeUGWgWzqBWFcrCfv8tritsqukccJPu3q5GPP3xS", "RaydiumRoute", ("route",))

    # AMMs
    RAYDIUM_V4 = DexProgram("675kPX9MHTjS2zt1qfr1NYHuzeLXfQM9H24wFSUt1Mp8", "RaydiumV4", ("amm",))
    RAYDIUM_AMM = DexProgram("5quBtoiQqxF9Jv6KYKctB59NT3gtJD2Y65kdnB1Uev3h", "RaydiumAMM", ("amm",))
    RAYDIUM_CPMM = DexProgram("CPMMoo8L3F4NbTegBCKVNunggL7H1ZpdTHKxQB5qKP1C", "RaydiumCPMM", ("amm",))
    RAYDIUM_CL = DexProgram("CAMMCzo5YL8w4VFF8KVHrK22GGUsp5VTaW7grrKgrWqK", "RaydiumCL", ("amm",))
    RAYDIUM_LCP = DexProgram("LanMV9sAd7wArD4vJFi2qDdfnVhFxYSUg6eADduJ3uj", "RaydiumLaunchpad", ("amm",))
    ORCA = DexProgram("whirLbMiicVdio4qvUfM5KAg6Ct8VwpYzGff3uctyCc", "Orca", ("amm",))
    METEORA = DexProgram("LBUZKhRxPF3XUpBCjp4YzTKgLccjZhTSDM9YuVaPwxo", "MeteoraDLMM", ("amm",))
    METEORA_DAMM = DexProgram("Eo7WjKq67rjJQSZxS6z3YkapzY3eMj6Xy8X5EQVn5UaB", "MeteoraDamm", ("amm",))
    METEORA_DAMM_V2 = DexProgram("cpamdpZCGKUy5JxQXB4dcpGPiikHawvSWAd6mEn1sGG", "MeteoraDammV2", ("amm",))
    METEORA_DBC = DexProgram("dbcij3LWUppWqq96dh6gJWwBifmcGfLSB5D4DuSMaqN", "MeteoraDBC", ("amm",))
    METEORA_VAULT = DexProgram("24Uqj9JCLxUeoC3hGfh5W3s9FM9uCHDS2SG3LYwBpyTi", "MeteoraVault", ("vault",))
    PUMP_FUN = DexProgram("6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P", "Pumpfun", ("amm",))
    PUMP_SWAP = DexProgram("pAMMBay6oceH9fJKBRHGP5D4bD4sWpmSwMn52FMfXEA", "Pumpswap", ("amm",))
    MOONIT = DexProgram("MoonCVVNZFSYkqNXP6bxHLPL6QQJiMagDL3qcqUQTrG", "Moonit", ("amm",))
    BOOP_FUN = DexProgram("boop8hVGQGqehUK2iVEMEnMrL5RbjywRzHKBmBE7ry4", "Boopfun", ("amm",))
    HEAVEN = DexProgram("HEAVENoP2qxoeuF8Dj2oT1GHEnu49U5mJYkdeC8BAX2o", "Heaven", ("amm",))
    SUGAR = DexProgram("deus4Bvftd5QKcEkE5muQaWGWDoma8GrySvPFrBPjhS", "Sugar", ("amm",))


ALL_DEX_PROGRAMS: dict[str, DexProgram] = {
    program.id: program
    for program in vars(DEX_PROGRAMS).values()
    if isinstance(program, DexProgram)
}

VAULT_PROGRAM_IDS: frozenset[str] = frozenset(
    program.id for program in ALL_DEX_PROGRAMS.values() if "vault" in program.tags
)

# Aggregators whose trades are authoritative for the whole transaction
AGGREGATOR_PROGRAM_IDS: tuple[str, ...] = (
    DEX_PROGRAMS.JUPITER.id,
    DEX_PROGRAMS.JUPITER_DCA.id,
    DEX_PROGRAMS.JUPITER_DCA_KEEPER1.id,
    DEX_PROGRAMS.JUPITER_DCA_KEEPER2.id,
    DEX_PROGRAMS.JUPITER_DCA_KEEPER3.id,
    DEX_PROGRAMS.JUPITER_VA.id,
    DEX_PROGRAMS.JUPITER_LIMIT_ORDER_V2.id,
)

# Never treated as DEX activity; token programs keep transfers in the caller's group
SYSTEM_PROGRAMS: frozenset[str] = frozenset({
    SYSTEM_PROGRAM_ID,
    COMPUTE_BUDGET_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
    TOKEN_2022_PROGRAM_ID,
    ASSOCIATED_TOKEN_PROGRAM_ID,
})

SKIP_PROGRAM_IDS: frozenset[str] = frozenset({
    MEMO_PROGRAM_ID,
    MEMO_V1_PROGRAM_ID,
    PUMP_FEE_PROGRAM_ID,
})

# Jito tip accounts
JITO_TIP_ACCOUNTS: frozenset[str] = frozenset({
    "96gYZGLnJYVFmbjzopPSU6QiEV5fGqZNyN9nmNhvrZU5",
    "HFqU5x63VTqvQss8hp11i4wVV8bD44PvwucfZ2bU7gRe",
    "Cw8CFyM9FkoMi7K7Crf6HNQqf4uEMzpKw6QNghXLvLkY",
    "ADaUMid9yfUytqMBgopwjb2DTLSokTSzL1zt6iGPaS49",
    "DfXygSm4jCyNCybVYYK6DwvWqjKee8pbDmJGcLWNDXjh",
    "ADuUkR4vqLUMWXxW9gh6D6L8pMSawimctcNZ5pGwDcEt",
    "DttWaMuVvTiduZRnguLF7jNxTgiMBZ1hyAumKUiL2KRL",
    "3AVi9Tg9Uo68tJfuvoKvqKNWKkC5wPdSSdeBnizKZ6jT",
})

# Protocol fee collectors; transfers landing here are fees, not swap legs
FEE_ACCOUNTS: frozenset[str] = frozenset({
    "CebN5WGQ4jvEPvsVU4EoHEpgzq1VV7AbicfhtW4xC9iM",  # pump.fun
    "62qc2CNXwrYqQScmEdiZFFAnJR262PxWEuNQtxfafNgV",  # pumpswap protocol fee recipients
    "7VtfL8fvgNfhz17qKRMjzQEXgbdpnHHHQRh54R9jP2RJ",
    "7hTckgnGnLQR6sdH7YkqFTAA7VwTfYFaZ6EhEsU3saCX",
    "9rPYyANsfQZw3DnDmKE3YCQF5E8oD89UXoHn9JFEhJUz",
    "AVmoTthdrX6tKt4nDjco2D775W2YK3sDhxPcMmzUAmTY",
    "FWsW1xNtWscwNmKv6wVsU1iTzRN6wmmk3MjxRP5tT7hz",
    "G5UZAVbAf46s7cKWoyKu8kYTip9DGTpbLZ2qa9Aq69dP",
    "JCRGumoE9Qi5BBgULTgdgTLjSgkCMSbF62ZZfGs84JeU",
}) | JITO_TIP_ACCOUNTS

# Pump.fun tokens are minted with 6 decimals
PUMPFUN_TOKEN_DECIMALS = 6


def get_program_name(program_id: str) -> str:
    program = ALL_DEX_PROGRAMS.get(program_id)
    return program.name if program else "Unknown"
