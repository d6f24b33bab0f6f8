from __future__ import annotations

import dataclasses
import typing as t

JsonDict = dict[str, t.Any]


@dataclasses.dataclass(frozen=True)
class ImageRef:
    src: str
    alt: str = ""
    width: int = 0
    height: int = 0

    @staticmethod
    def from_dict(data: JsonDict) -> "ImageRef":
        return ImageRef(
            src=str(data.get("src") or ""),
            alt=str(data.get("alt") or ""),
            width=_as_int(data.get("width")),
            height=_as_int(data.get("height")),
        )


@dataclasses.dataclass(frozen=True)
class Item:
    text: str | None = None
    image: ImageRef | None = None

    @staticmethod
    def from_dict(data: JsonDict) -> "Item":
        text = data.get("plaintext")
        img = data.get("img")
        return Item(
            text=str(text) if text else None,
            image=ImageRef.from_dict(img) if isinstance(img, dict) else None,
        )


@dataclasses.dataclass(frozen=True)
class Section:
    title: str
    items: list[Item] = dataclasses.field(default_factory=list)

    @property
    def first_item(self) -> Item | None:
        # The service puts the primary content of a pod first.
        return self.items[0] if self.items else None

    @property
    def text(self) -> str | None:
        item = self.first_item
        return item.text if item else None

    @property
    def image(self) -> ImageRef | None:
        item = self.first_item
        if item is None or item.image is None or not item.image.src:
            return None
        return item.image


@dataclasses.dataclass(frozen=True)
class QueryResult:
    success: bool
    sections: list[Section] = dataclasses.field(default_factory=list)

    @property
    def titles(self) -> list[str]:
        return [s.title for s in self.sections]


def _as_int(value: t.Any) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        return 0


def sections_from_pods(pods: t.Any) -> list[Section]:
    """Convert the ``pods`` array of a Full Results API response."""
    if not isinstance(pods, list):
        return []
    out: list[Section] = []
    for pod in pods:
        if not isinstance(pod, dict):
            continue
        subpods = pod.get("subpods") or []
        items = [Item.from_dict(sp) for sp in subpods if isinstance(sp, dict)]
        out.append(Section(title=str(pod.get("title") or ""), items=items))
    return out
