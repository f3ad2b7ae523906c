# File: hebrewduo_app/modules/training/config.py

class TrainingModuleDefaultConfig:
    TRAINING_DEFAULT_SIZE = 10
    TRAINING_STRENGTH_STEP = 10
    TRAINING_MIN_STRENGTH = 0
    TRAINING_MAX_STRENGTH = 100
    TRAINING_OPTION_COUNT = 4
    TRAINING_SESSION_KEY = 'training_session'
