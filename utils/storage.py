import os
import json
from typing import Any, Optional
from botocore.exceptions import ClientError

from core.config import s3, R2_BUCKET, STATIC_DIR, logger


def _local_path(key: str) -> str:
    return os.path.join(STATIC_DIR, key)


def write_json_key(key: str, payload: Any):
    data = json.dumps(payload, ensure_ascii=False)
    if s3 and R2_BUCKET:
        bucket = s3.Bucket(R2_BUCKET)
        bucket.put_object(Key=key, Body=data.encode('utf-8'), ContentType='application/json', ACL='private')
    else:
        path = _local_path(key)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        # Write-then-rename so a crash mid-write never leaves half a blob behind
        tmp = path + ".tmp"
        with open(tmp, 'w', encoding='utf-8') as f:
            f.write(data)
        os.replace(tmp, path)


def load_json_key(key: str) -> Optional[Any]:
    """Return the parsed blob, or None when the key does not exist. Any other failure raises."""
    if s3 and R2_BUCKET:
        obj = s3.Object(R2_BUCKET, key)
        try:
            body = obj.get()["Body"].read().decode("utf-8")
        except ClientError as ce:
            if ce.response.get('Error', {}).get('Code') in ('NoSuchKey', '404'):
                return None
            raise
        return json.loads(body)
    path = _local_path(key)
    if not os.path.isfile(path):
        return None
    with open(path, 'r', encoding='utf-8') as f:
        return json.load(f)
