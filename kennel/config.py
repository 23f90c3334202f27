import os
from dataclasses import dataclass, fields

from flask import current_app


class Config:
    # Database
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL', 'sqlite:///kennel.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Program rules
    MIN_TRAINING_WEEKS = int(os.getenv('MIN_TRAINING_WEEKS', 14))
    MAX_TRAINING_WEEKS = int(os.getenv('MAX_TRAINING_WEEKS', 22))  # display warning only
    MAX_TRAINING_DOGS_PER_TRAINER = int(os.getenv('MAX_TRAINING_DOGS_PER_TRAINER', 6))
    MAX_CLASS_DOGS_PER_TRAINER = int(os.getenv('MAX_CLASS_DOGS_PER_TRAINER', 3))
    CLASS_DURATION_WEEKS = int(os.getenv('CLASS_DURATION_WEEKS', 2))

    # Forecast
    DEFAULT_FORECAST_WEEKS = 12
    MAX_FORECAST_WEEKS = 52

    # Scheduler
    SCHEDULER_API_ENABLED = False
    SCHEDULER_TIMEZONE = 'UTC'
    STATUS_SYNC_HOUR = int(os.getenv('STATUS_SYNC_HOUR', 3))

    # CORS
    CORS_ORIGINS = os.getenv('CORS_ORIGINS', 'http://localhost:3000').split(',')

    # Logging
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.getenv('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    DEBUG = False
    # في الإنتاج لازم يتحدد من environment
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL')


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    LOG_LEVEL = 'WARNING'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}


@dataclass(frozen=True)
class ProgramRules:
    """Program constants the scheduling engine runs against.

    Built from the Flask config so tests and deployments can change the
    boundaries (e.g. ``MIN_TRAINING_WEEKS=1``) without touching the code.
    """

    min_training_weeks: int = 14
    max_training_weeks: int = 22
    max_training_dogs_per_trainer: int = 6
    max_class_dogs_per_trainer: int = 3
    class_duration_weeks: int = 2

    def __post_init__(self):
        if self.class_duration_weeks < 1:
            raise ValueError("CLASS_DURATION_WEEKS must be at least 1")
        if self.min_training_weeks < 0:
            raise ValueError("MIN_TRAINING_WEEKS must not be negative")
        if self.max_training_dogs_per_trainer < 0 or self.max_class_dogs_per_trainer < 0:
            raise ValueError("trainer capacity must not be negative")
        if self.max_training_weeks < self.min_training_weeks:
            raise ValueError("MAX_TRAINING_WEEKS must be >= MIN_TRAINING_WEEKS")

    @classmethod
    def from_config(cls, mapping):
        values = {}
        for f in fields(cls):
            key = f.name.upper()
            if key in mapping:
                values[f.name] = int(mapping[key])
        return cls(**values)

    @classmethod
    def current(cls):
        return cls.from_config(current_app.config)


def resolve_rules(rules=None):
    return rules if rules is not None else ProgramRules.current()
