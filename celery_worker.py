from app.celery_app import celery_app

app = celery_app
