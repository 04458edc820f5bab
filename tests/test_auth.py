from woo_settings_mcp.auth import StaticAuthorizer, TokenAuthorizer


def test_static_authorizer():
    assert StaticAuthorizer(True).can_manage_settings() is True
    assert StaticAuthorizer(False).can_manage_settings() is False


def test_token_authorizer_matches_bearer():
    assert TokenAuthorizer("s3cret", "Bearer s3cret").can_manage_settings() is True
    assert TokenAuthorizer("s3cret", "bearer   s3cret ").can_manage_settings() is True


def test_token_authorizer_rejects():
    assert TokenAuthorizer("s3cret", "Bearer wrong").can_manage_settings() is False
    assert TokenAuthorizer("s3cret", "Basic s3cret").can_manage_settings() is False
    assert TokenAuthorizer("s3cret", None).can_manage_settings() is False
    assert TokenAuthorizer("s3cret", "Bearer ").can_manage_settings() is False
    # No admin token configured means nobody may write.
    assert TokenAuthorizer(None, "Bearer anything").can_manage_settings() is False
