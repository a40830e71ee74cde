# endpoint descriptors: data only, one concrete frozen dataclass per endpoint

from __future__ import annotations
from enum import Enum
from typing import Any, ClassVar, Generic, TypeVar, get_args, get_origin
from .decoding import check_shape

ResponseT = TypeVar("ResponseT")

class HttpMethod(Enum):
    GET = "GET"
    POST = "POST"

def join_url(base_url: str, path: str) -> str:
    # append path as a path component, never doubling or dropping the separator
    if not path:
        return base_url
    return base_url.rstrip("/") + "/" + path.lstrip("/")

# description of one endpoint and the shape its JSON body decodes into
# response_type comes from the generic argument: Requestable[List[Item]] decodes into List[Item]
# values are not validated, a malformed URL surfaces when the request is sent
class Requestable(Generic[ResponseT]):
    base_url: str
    path: str
    http_method: HttpMethod
    response_type: ClassVar[Any]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "response_type" not in cls.__dict__:
            for base in cls.__dict__.get("__orig_bases__", ()):
                if get_origin(base) is Requestable:
                    (arg,) = get_args(base)
                    if not isinstance(arg, TypeVar):
                        cls.response_type = arg
                    break
        if "response_type" in cls.__dict__:
            check_shape(cls.response_type)

    def url(self) -> str:
        return join_url(self.base_url, self.path)
