"""HTTP surface shared by server and client: paths and header names."""

STATUS_V14_PATH = "/spaceapi/v14"
OPEN_SPACE_PATH = "/admin/publish/space-open"
CLOSE_SPACE_PATH = "/admin/publish/space-close"

API_KEY_HEADER = "X-API-Key"
