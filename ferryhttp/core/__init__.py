SERVICE_NAME = "ferryhttp"
