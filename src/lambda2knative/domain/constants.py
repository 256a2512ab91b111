"""Fixed identifiers and literals used by the migrator."""

# Support packages the generated adapter may need, in the order imports are added.
CONTEXT_PATH: str = "context"
HTTP_PATH: str = "net/http"
IO_PATH: str = "io"
JSON_PATH: str = "encoding/json"
LOG_PATH: str = "log"

SUPPORT_IMPORTS: tuple[str, ...] = (CONTEXT_PATH, HTTP_PATH, IO_PATH, JSON_PATH, LOG_PATH)

# Names inside the generated dispatch method.
RECEIVER_NAME: str = "h"
CTX_PARAM: str = "ctx"
WRITER_PARAM: str = "w"
REQUEST_PARAM: str = "r"
BODY_VAR: str = "body"
RESULT_VAR: str = "result"
ERR_VAR: str = "err"

ERROR_LOG_FORMAT: str = '"Handler error: %v"'
ERROR_STATUS: str = "500"

CONFIG_SECTION: str = "lambda2knative"
CONFIG_FILES: tuple[str, ...] = ("lambda2knative.toml", "pyproject.toml")
