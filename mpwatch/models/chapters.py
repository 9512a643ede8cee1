from dataclasses import dataclass


@dataclass(frozen=True)
class Chapter:
    id: str
    title: str
    content: str
    filename: str = ""
