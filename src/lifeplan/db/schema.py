"""SQLite database schema definitions."""

SCHEMA_SQL = """
-- User profiles
CREATE TABLE IF NOT EXISTS user_profiles (
    user_id INTEGER PRIMARY KEY AUTOINCREMENT,
    sex TEXT NOT NULL CHECK(sex IN ('male', 'female')),
    age INTEGER NOT NULL,
    height_cm REAL NOT NULL,
    weight_kg REAL NOT NULL,
    activity_level TEXT NOT NULL DEFAULT 'moderate'
        CHECK(activity_level IN ('sedentary', 'light', 'moderate', 'active', 'very_active')),
    goal_type TEXT NOT NULL DEFAULT 'health'
        CHECK(goal_type IN ('fat_loss', 'muscle_gain', 'recomp', 'health')),
    diet_preference TEXT,
    job_type TEXT,
    conditions_json TEXT NOT NULL DEFAULT '[]',
    fasting_mode BOOLEAN DEFAULT FALSE,
    tracks_cycle BOOLEAN DEFAULT FALSE,
    last_period_date DATE,
    cycle_length INTEGER DEFAULT 28,
    body_fat_percent REAL,
    target_weight_kg REAL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);

-- Daily health log (sleep, energy, stress, water, mood)
CREATE TABLE IF NOT EXISTS health_logs (
    user_id INTEGER NOT NULL,
    log_date DATE NOT NULL,
    sleep_hours REAL,
    sleep_quality TEXT,
    energy_level INTEGER,
    stress_level INTEGER,
    mood INTEGER,
    water_glasses INTEGER DEFAULT 0,
    screen_time_hours REAL,
    digestion_quality TEXT,
    breathing_exercise_done BOOLEAN DEFAULT FALSE,
    notes TEXT,
    UNIQUE(user_id, log_date),
    FOREIGN KEY (user_id) REFERENCES user_profiles(user_id)
);

-- Daily looks log (skincare, grooming, facial exercises)
CREATE TABLE IF NOT EXISTS looks_logs (
    user_id INTEGER NOT NULL,
    log_date DATE NOT NULL,
    morning_routine_done BOOLEAN DEFAULT FALSE,
    evening_routine_done BOOLEAN DEFAULT FALSE,
    grooming_json TEXT NOT NULL DEFAULT '[]',
    facial_exercises_done BOOLEAN DEFAULT FALSE,
    mewing_minutes INTEGER DEFAULT 0,
    hair_routine_done BOOLEAN DEFAULT FALSE,
    skin_condition_notes TEXT,
    UNIQUE(user_id, log_date),
    FOREIGN KEY (user_id) REFERENCES user_profiles(user_id)
);

-- Daily routine log (habits, wake/sleep, focus)
CREATE TABLE IF NOT EXISTS routine_logs (
    user_id INTEGER NOT NULL,
    log_date DATE NOT NULL,
    wake_time TEXT,
    sleep_time TEXT,
    habits_json TEXT NOT NULL DEFAULT '[]',
    focus_hours REAL DEFAULT 0,
    distractions_avoided BOOLEAN DEFAULT FALSE,
    notes TEXT,
    UNIQUE(user_id, log_date),
    FOREIGN KEY (user_id) REFERENCES user_profiles(user_id)
);

-- Daily training and compliance log
CREATE TABLE IF NOT EXISTS daily_logs (
    user_id INTEGER NOT NULL,
    log_date DATE NOT NULL,
    food_compliance_percent REAL,
    protein_completion_percent REAL,
    workout_done BOOLEAN DEFAULT FALSE,
    workout_skipped_reason TEXT,
    energy_level INTEGER,
    sleep_hours REAL,
    sleep_quality INTEGER,
    soreness_level INTEGER,
    mood INTEGER,
    stress_level INTEGER,
    weight_kg REAL,
    UNIQUE(user_id, log_date),
    FOREIGN KEY (user_id) REFERENCES user_profiles(user_id)
);

CREATE INDEX IF NOT EXISTS idx_daily_logs_user_date ON daily_logs(user_id, log_date);

-- Weight samples with EMA trend (Hacker's Diet style)
CREATE TABLE IF NOT EXISTS weight_samples (
    sample_id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id INTEGER NOT NULL,
    measured_at DATE NOT NULL,
    weight_kg REAL NOT NULL,
    body_fat_percent REAL,
    trend_kg REAL NOT NULL,
    UNIQUE(user_id, measured_at),
    FOREIGN KEY (user_id) REFERENCES user_profiles(user_id)
);

CREATE INDEX IF NOT EXISTS idx_weight_samples_user_date ON weight_samples(user_id, measured_at);

-- Active user mode (one row per user)
CREATE TABLE IF NOT EXISTS user_modes (
    user_id INTEGER PRIMARY KEY,
    mode TEXT NOT NULL DEFAULT 'normal'
        CHECK(mode IN ('normal', 'travel', 'sick', 'exam', 'festival')),
    active_since DATE,
    auto_expiry DATE,
    reason TEXT,
    FOREIGN KEY (user_id) REFERENCES user_profiles(user_id)
);

-- Rolling TDEE estimate (one row per user)
CREATE TABLE IF NOT EXISTS calibration_states (
    user_id INTEGER PRIMARY KEY,
    formula_tdee REAL NOT NULL,
    estimate REAL NOT NULL,
    variance REAL NOT NULL,
    history_json TEXT NOT NULL DEFAULT '[]',
    updated_at DATE,
    FOREIGN KEY (user_id) REFERENCES user_profiles(user_id)
);

-- Computed daily plans (last write wins)
CREATE TABLE IF NOT EXISTS daily_plans (
    user_id INTEGER NOT NULL,
    plan_date DATE NOT NULL,
    mode TEXT NOT NULL,
    life_score INTEGER NOT NULL,
    plan_json TEXT NOT NULL,
    created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
    UNIQUE(user_id, plan_date),
    FOREIGN KEY (user_id) REFERENCES user_profiles(user_id)
);
"""


def get_schema_sql() -> str:
    """Return the complete schema SQL."""
    return SCHEMA_SQL
