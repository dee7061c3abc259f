def bearer(token):
    return {"Authorization": f"Bearer {token}"}


def refresh_cookie(client, app):
    cookie = client.get_cookie(app.config["REFRESH_COOKIE_NAME"])
    return cookie.value if cookie else None
