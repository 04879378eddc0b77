from flask import Flask, g, jsonify, redirect, request, url_for
from flask_login import LoginManager
from config import (
    SECRET_KEY, TRUST_PROXY_HEADERS, PROXY_FIX_NUM_PROXIES, IS_PRODUCTION,
    SESSION_COOKIE_HTTPONLY, SESSION_COOKIE_SAMESITE, SESSION_COOKIE_SECURE,
    PREFERRED_URL_SCHEME,
)
from database import close_connection
from extensions import limiter

# Blueprints
from routes.auth import auth_bp, load_shop_session
from routes.admin import admin_bp
from routes.public import public_bp
from routes.webhooks import webhooks_bp


def create_app(test_config=None):
    app = Flask(__name__)

    app.config['SECRET_KEY'] = SECRET_KEY
    app.config['SESSION_COOKIE_HTTPONLY'] = SESSION_COOKIE_HTTPONLY
    app.config['SESSION_COOKIE_SAMESITE'] = SESSION_COOKIE_SAMESITE
    app.config['SESSION_COOKIE_SECURE'] = SESSION_COOKIE_SECURE
    app.config['PREFERRED_URL_SCHEME'] = PREFERRED_URL_SCHEME

    # Test overrides win over env-derived settings
    if test_config:
        app.config.update(test_config)

    from utils.logger import setup_logger
    setup_logger(app)

    @app.route("/healthz")
    def healthz():
        from database import get_db
        try:
            db = get_db()
            db.execute("SELECT 1").fetchone()
            return {"status": "ok", "db": "connected"}, 200
        except Exception as e:
            app.logger.error(f"[Health] DB check failed: {type(e).__name__}")
            return {"status": "error", "db": type(e).__name__}, 503

    @app.route("/ping")
    def ping():
        return {"status": "ok"}, 200

    if IS_PRODUCTION and TRUST_PROXY_HEADERS:
        from werkzeug.middleware.proxy_fix import ProxyFix
        n = PROXY_FIX_NUM_PROXIES
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=n, x_proto=n, x_host=n, x_port=n)
        app.logger.info(f"[Security] ProxyFix enabled for {n} proxies")

    limiter.init_app(app)

    app.teardown_appcontext(close_connection)

    # Embedded admin requests authenticate with an App Bridge session token,
    # never a cookie login.
    login_manager = LoginManager()
    login_manager.init_app(app)
    login_manager.request_loader(load_shop_session)

    @login_manager.unauthorized_handler
    def unauthorized():
        from services.shopify_auth import is_valid_shop_domain
        token_shop = getattr(g, "token_shop", None)

        if request.headers.get("Authorization"):
            # fetch() from App Bridge: a redirect would land inside the iframe
            resp = jsonify({"error": "unauthorized"})
            resp.status_code = 401
            if token_shop:
                # Token is fine but the shop has no stored offline session
                resp.headers["X-Shopify-API-Request-Failure-Reauthorize"] = "1"
                resp.headers["X-Shopify-API-Request-Failure-Reauthorize-Url"] = url_for("auth.begin", shop=token_shop)
            else:
                resp.headers["X-Shopify-Retry-Invalid-Session-Request"] = "1"
            return resp

        shop = token_shop or request.args.get("shop")
        if shop and is_valid_shop_domain(shop):
            return redirect(url_for("auth.begin", shop=shop))
        return jsonify({"error": "unauthorized"}), 401

    app.register_blueprint(public_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp)
    app.register_blueprint(webhooks_bp)

    return app


# WSGI Entry Point
app = create_app()

if __name__ == "__main__":
    app.run(host='0.0.0.0', debug=not IS_PRODUCTION)
