import serverless_wsgi

from menuscan import create_app
from menuscan.config.settings import ProductionConfig

app = create_app(ProductionConfig)


def handler(event, context):
    return serverless_wsgi.handle_request(app, event, context)
