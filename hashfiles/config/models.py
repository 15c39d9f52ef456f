from pydantic import BaseModel, Field
from typing import Literal

DEFAULT_CHUNK_SIZE = 1 << 20


class HashingConfig(BaseModel):
    algorithms: str = "md5"
    parallel: int | None = Field(default=None, gt=0)
    chunk_size: int = Field(default=DEFAULT_CHUNK_SIZE, gt=0)
    strategy: Literal["gate", "chunked"] = "gate"
    error_policy: Literal["abort", "collect"] = "abort"
    ignore_patterns: list[str] = Field(default_factory=list)
    include_sum_files: bool = False


class VerifyConfig(BaseModel):
    fail_on_mismatch: bool = False


class HashfilesConfig(BaseModel):
    hashing: HashingConfig = Field(default_factory=HashingConfig)
    verify: VerifyConfig = Field(default_factory=VerifyConfig)
    verbose: bool = False
    log_level: Literal["debug", "info", "warn", "error"] = "info"
    log_format: Literal["text", "json"] = "text"
