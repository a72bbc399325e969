# sourcebutler/utils/encoding_detector.py

import chardet
from sourcebutler.utils.logger import logger

def detect_file_encoding(file_path: str) -> str:
    """
    Detect the encoding of a file.

    Args:
        file_path (str): Path to the file

    Returns:
        str: Detected encoding or 'utf-8' as fallback
    """
    try:
        with open(file_path, 'rb') as f:
            raw = f.read(10000)  # Read first 10KB
    except OSError as e:
        logger.error(f"Failed to detect encoding for {file_path}: {str(e)}")
        return 'utf-8'

    # Fast path: UTF-8 (and plain ASCII) decodes without chardet.
    # A multi-byte sequence cut at the 10KB boundary still counts as UTF-8.
    try:
        raw.decode('utf-8')
        return 'utf-8'
    except UnicodeDecodeError as e:
        if e.start >= len(raw) - 3 and e.reason == "unexpected end of data":
            return 'utf-8'

    result = chardet.detect(raw)
    return result.get('encoding') or 'utf-8'
