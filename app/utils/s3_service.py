import logging
import os
from functools import lru_cache
from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError


logger = logging.getLogger(__name__)

BUCKET = os.getenv("R2_BUCKET")
URL = f"https://{os.getenv('CLOUDFLARE_ACCOUNT_ID')}.r2.cloudflarestorage.com"


@lru_cache(maxsize=1)
def get_client():
    return boto3.client(
        service_name="s3",
        endpoint_url=URL,
        aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID"),
        aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY"),
        region_name="auto",
    )


def generate_signed_url(photo_ref: str, expires_in=3600) -> Optional[str]:
    """Turn a stored photo reference into something a browser can load."""
    if not photo_ref:
        return None

    # Without a bucket, or for references that are already URLs, serve as stored
    if not BUCKET or photo_ref.startswith(("http://", "https://")):
        return photo_ref

    try:
        return get_client().generate_presigned_url(
            "get_object",
            Params={"Bucket": BUCKET, "Key": photo_ref},
            ExpiresIn=expires_in,
        )
    except (BotoCoreError, ClientError) as e:
        logger.error(f"Error generating signed URL for {photo_ref}: {e}")
        return None
