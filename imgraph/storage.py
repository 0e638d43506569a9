"""
Storage layer for imgraph.

Images reach the graph as bytes, from a local path (plain or file://) or an
s3://bucket/key object. Both directions go through here so that the image code
never has to know where the bytes live. Failures of either backend are
reported as ImageIOError; a url with an unsupported scheme is a ValueError.
"""

import urllib.parse
import os
import mimetypes
import functools
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .errors import ImageIOError

logger = logging.getLogger(__name__)

LOCAL_SCHEMES = ('', 'file')
S3_SCHEME = 's3'


@functools.lru_cache(maxsize=4)
def s3_client():
    return boto3.session.Session().client( S3_SCHEME )


def split_url(url):
    """Returns (scheme, bucket, key). For local files bucket is None and key is the path."""
    o = urllib.parse.urlparse(url)
    if o.scheme in LOCAL_SCHEMES:
        return (o.scheme, None, o.path)
    if o.scheme == S3_SCHEME:
        return (o.scheme, o.netloc, o.path.lstrip('/'))
    raise ValueError(f"unknown scheme {o.scheme} in url {url}")


def save_bytes(url, data, mimetype=None):
    (scheme, bucket, key) = split_url(url)
    logger.debug("save %d bytes to %s",len(data),url)
    try:
        if bucket is None:
            if os.path.dirname(key):
                os.makedirs(os.path.dirname(key), exist_ok=True)
            with open(key,'wb') as f:
                f.write(data)
        else:
            s3_client().put_object(Body=data, Bucket=bucket, Key=key,
                                   ContentType=mimetype or mimetypes.guess_type(key)[0]
                                               or 'application/octet-stream')
    except (OSError, BotoCoreError, ClientError) as e:
        raise ImageIOError(f"cannot write '{url}': {e}") from e


def load_bytes(url):
    (scheme, bucket, key) = split_url(url)
    logger.debug("load %s",url)
    try:
        if bucket is None:
            with open(key,'rb') as f:
                return f.read()
        return s3_client().get_object(Bucket=bucket, Key=key)['Body'].read()
    except (OSError, BotoCoreError, ClientError) as e:
        raise ImageIOError(f"cannot read '{url}': {e}") from e
