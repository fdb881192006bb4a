import logging
from flask import Flask, jsonify
from werkzeug.middleware.proxy_fix import ProxyFix
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

# RCS Formatter Flask Application
# Serves the compliance, media size and RBM export API used by the formatter dashboard

from rcs_formatter import __version__
from rcs_formatter.config.centralized_config import get_config
from rcs_formatter.routes.formatter_routes import formatter_bp
from rcs_formatter.utils.logger import configure_root_logger

config = get_config()

configure_root_logger(config.application.log_level.value)
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = config.application.session_secret.get_secret_value()
app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)

# Configure rate limiting
limiter = Limiter(
    app=app,
    key_func=get_remote_address,
    default_limits=config.rate_limit.default_limits,
    storage_uri=config.rate_limit.storage_uri,
    enabled=config.rate_limit.enabled,
    headers_enabled=True
)
limiter.limit(config.rate_limit.api_limit)(formatter_bp)

app.register_blueprint(formatter_bp)

logger.info(f"RCS Formatter {__version__} started ({config.application.environment.value})")


@app.route('/health')
@limiter.exempt
def health_check():
    """Health check endpoint"""
    return jsonify({
        "status": "healthy",
        "version": __version__,
        "environment": config.application.environment.value,
        "limits": config.limits.model_dump()
    })


if __name__ == '__main__':
    app.run(
        host=config.application.host,
        port=config.application.port,
        debug=config.application.debug
    )
