VERSION = "1.4.0"

# API接口前缀
API_BASE = "/api"
