WEBHOOK_SECRET = "test-secret-key-for-hmac"
PIXEL_ID = "123456789"
ACCESS_TOKEN = "meta-test-token"
ORDER_TOKEN = "utmify-test-token"
GATEWAY_KEY = "gateway-secret-key"

CONVERSION_PATH = f"/v18.0/{PIXEL_ID}/events"
ORDERS_PATH = "/api-credentials/orders"
GATEWAY_PATH = "/api/v1/transaction.getPayment"
