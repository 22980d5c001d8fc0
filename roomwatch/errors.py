class RoomwatchError(Exception):
    """Base class for errors that end up in front of a chat user."""

    user_message = "エラーが発生しました。"

    def __init__(self, detail: str = "", user_message: str | None = None):
        super().__init__(detail or self.user_message)
        self.detail = detail
        if user_message is not None:
            self.user_message = user_message


class ConfigurationError(RoomwatchError):
    user_message = "検索URLが設定されていません。「URL更新 https://...」で設定してください。"


class UnsupportedSiteError(ConfigurationError):
    user_message = "対応していないサイトのURLです。SUUMOまたはCanaryのURLを設定してください。"


class FetchError(RoomwatchError):
    user_message = "物件情報の取得に失敗しました。しばらくしてから再度お試しください。"


class FetchTimeoutError(FetchError):
    user_message = "物件情報の取得がタイムアウトしました。しばらくしてから再度お試しください。"


class FetchAuthError(FetchError):
    user_message = "取得サービスの認証エラー: APIキーを確認してください。"


class FetchQuotaError(FetchError):
    user_message = "取得サービスの利用上限: リクエスト数を超過している可能性があります。"


class FetchRequestError(FetchError):
    user_message = "取得サービスのリクエストエラー: リクエストパラメータを確認してください。"


class RenderingUnavailableError(FetchError):
    user_message = "ブラウザ描画サービスが設定されていません。APIキーを確認してください。"


def raise_for_status_code(status: int, service: str, detail: str = "") -> None:
    """Raise the typed FetchError matching an upstream HTTP status."""
    if status < 400:
        return
    message = f"{service} HTTP {status}: {detail}".rstrip(": ")
    if status == 401:
        raise FetchAuthError(message)
    if status in (403, 429):
        raise FetchQuotaError(message)
    if status in (400, 422):
        raise FetchRequestError(message)
    raise FetchError(message)
