from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator

from arena.utils.datetime import ensure_utc

# SQLite 에서 읽은 naive datetime 도 UTC 오프셋을 붙여 직렬화 (RFC 3339)
UtcDatetime = Annotated[datetime, AfterValidator(ensure_utc)]
