"""Sample data for local development (``flask db-reset``)."""
from echoarena import bcrypt, db
from echoarena.models import Category, Question, User

SAMPLE_USERS = ['testuser1', 'testuser2', 'testuser3']

# (category, difficulty, text, options A-D, correct)
SAMPLE_QUESTIONS = [
    ('Science', 'easy', 'What planet is known as the Red Planet?',
     ('Venus', 'Mars', 'Jupiter', 'Saturn'), 'B'),
    ('Science', 'easy', 'What gas do plants absorb from the air?',
     ('Oxygen', 'Nitrogen', 'Carbon dioxide', 'Helium'), 'C'),
    ('Science', 'medium', 'What is the chemical symbol for sodium?',
     ('So', 'Sd', 'Na', 'S'), 'C'),
    ('Science', 'hard', 'Which particle carries no electric charge?',
     ('Proton', 'Electron', 'Positron', 'Neutron'), 'D'),
    ('Math', 'easy', 'What is 7 x 8?',
     ('54', '56', '58', '64'), 'B'),
    ('Math', 'medium', 'What is the square root of 169?',
     ('12', '13', '14', '16'), 'B'),
    ('Math', 'hard', 'How many prime numbers are there below 30?',
     ('8', '9', '10', '11'), 'C'),
    ('Geography', 'easy', 'What is the capital of Japan?',
     ('Osaka', 'Kyoto', 'Tokyo', 'Nagoya'), 'C'),
    ('Geography', 'medium', 'Which river is the longest in Africa?',
     ('Congo', 'Niger', 'Zambezi', 'Nile'), 'D'),
    ('Geography', 'hard', 'Which country has the most islands?',
     ('Sweden', 'Indonesia', 'Philippines', 'Canada'), 'A'),
]


def seed_database():
    for username in SAMPLE_USERS:
        db.session.add(User(
            username=username,
            password_hash=bcrypt.generate_password_hash('password').decode('utf-8'),
        ))

    categories = {}
    for name, difficulty, text, options, correct in SAMPLE_QUESTIONS:
        if name not in categories:
            categories[name] = Category(name=name)
            db.session.add(categories[name])
        option_a, option_b, option_c, option_d = options
        db.session.add(Question(
            category=categories[name],
            difficulty=difficulty,
            question_text=text,
            option_a=option_a,
            option_b=option_b,
            option_c=option_c,
            option_d=option_d,
            correct_answer=correct,
        ))

    db.session.commit()
