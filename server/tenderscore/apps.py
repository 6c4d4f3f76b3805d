from django.apps import AppConfig


class TenderscoreConfig(AppConfig):
    default_auto_field = 'django.db.models.BigAutoField'
    name = 'tenderscore'
    verbose_name = 'Tender Scoring'
