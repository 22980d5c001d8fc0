from dataclasses import dataclass, field


@dataclass
class Listing:
    title: str
    address: str
    rent: str
    detail_url: str
    source: str
    layout: str = ""
    floor: str = ""
    area: str = ""
    age: str = ""
    image_url: str = ""
    management_fee: str = ""
    deposit: str = ""
    gratuity: str = ""
    access: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    is_error: bool = False

    @property
    def unique_key(self) -> str:
        return self.detail_url


@dataclass
class ConfiguredSearch:
    id: int
    conversation_id: str
    url: str


def error_listing(detail: str, search_url: str, source: str, placeholder_image: str = "") -> Listing:
    """Stand-in listing that carries an operational failure to the chat."""
    return Listing(
        title="エラー",
        address=detail,
        rent="-",
        detail_url=search_url,
        source=source,
        layout="-",
        floor="-",
        area="-",
        age="-",
        image_url=placeholder_image,
        management_fee="-",
        deposit="-",
        gratuity="-",
        access=["技術的な問題が発生しています"],
        tags=["エラー"],
        is_error=True,
    )
