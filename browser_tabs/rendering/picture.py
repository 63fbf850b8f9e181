"""
PictureStore - 스크린샷/아이콘 이미지 인코딩과 파일 저장

탭을 메모리에서 내릴 때 마지막 화면을 PNG로 저장하고,
다시 살릴 때 읽어서 뷰에 돌려준 뒤 파일을 지웁니다.
이미지는 skia.Image로 다룹니다.
"""
import os
from typing import Optional

import skia

from ..common.constants import PICTURE_FILE_SUFFIX
from ..profiling import log_warning

LOGTAG = "PictureStore"


def encode_image(image: skia.Image) -> Optional[bytes]:
    """skia.Image -> PNG 바이트 (실패 시 None)"""
    data = image.encodeToData(skia.EncodedImageFormat.kPNG, 100)
    if data is None:
        return None
    return bytes(data)


def decode_image(raw: bytes) -> Optional[skia.Image]:
    """인코딩된 바이트 -> skia.Image (해석 불가하면 None)"""
    if not raw:
        return None
    return skia.Image.MakeFromEncoded(skia.Data.MakeWithCopy(raw))


class PictureStore:
    def __init__(self, directory: str):
        self.directory = directory

    def path_for(self, view_hash: int) -> str:
        return os.path.join(self.directory, f"{view_hash}{PICTURE_FILE_SUFFIX}")

    def save(self, image: skia.Image, path: str) -> bool:
        """이미지를 파일로 저장. 실패해도 예외를 올리지 않음"""
        raw = encode_image(image)
        if raw is None:
            log_warning(LOGTAG, f"could not encode picture for {path}")
            return False
        try:
            os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
            with open(path, "wb") as f:
                f.write(raw)
        except OSError as e:
            log_warning(LOGTAG, f"could not write {path}: {e}")
            return False
        return True

    def load(self, path: str) -> Optional[skia.Image]:
        try:
            with open(path, "rb") as f:
                raw = f.read()
        except OSError as e:
            log_warning(LOGTAG, f"could not read {path}: {e}")
            return None
        image = decode_image(raw)
        if image is None:
            log_warning(LOGTAG, f"corrupt picture {path}")
        return image

    def delete(self, path: str) -> bool:
        try:
            os.remove(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            log_warning(LOGTAG, f"could not delete {path}: {e}")
            return False
        return True

    def take(self, path: str) -> Optional[skia.Image]:
        """한 번 쓰고 버리는 파일: 읽은 뒤 성공 여부와 관계없이 삭제"""
        image = self.load(path)
        self.delete(path)
        return image
