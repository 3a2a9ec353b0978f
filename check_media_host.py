# Verify the Cloudinary credentials from the environment / .env file.
import json
import sys

from article_publisher.errors import UploadError
from article_publisher.media import CloudinaryGateway

gateway = CloudinaryGateway.from_env()
print("Testing Cloudinary config...")
print("Cloud Name:", gateway.cloud_name)
print("API Key:", gateway.api_key)

try:
    result = gateway.ping()
except UploadError as e:
    print("Ping failed!")
    print("Error Message:", e)
    sys.exit(1)
print("Ping successful!", json.dumps(result))
