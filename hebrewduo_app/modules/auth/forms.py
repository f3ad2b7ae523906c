# File: hebrewduo_app/modules/auth/forms.py
# Login, registration and admin user-management forms.

from flask_wtf import FlaskForm
from wtforms import BooleanField, PasswordField, SelectField, StringField
from wtforms.validators import DataRequired, EqualTo, Length, Optional, Regexp, ValidationError

from ...models import User

EMAIL_PATTERN = r'^[^@\s]+@[^@\s]+\.[^@\s]+$'


def _email_taken(email: str, exclude_user_id=None) -> bool:
    existing = User.query.filter(User.email == email.strip().lower()).first()
    return existing is not None and existing.user_id != exclude_user_id


class LoginForm(FlaskForm):
    email = StringField('Email', validators=[DataRequired(message="Merci d'indiquer ton email.")])
    password = PasswordField('Mot de passe', validators=[DataRequired(message="Merci d'indiquer ton mot de passe.")])
    remember_me = BooleanField('Se souvenir de moi')


class RegistrationForm(FlaskForm):
    email = StringField(
        'Email',
        validators=[DataRequired(message="Merci d'indiquer ton email."), Regexp(EMAIL_PATTERN, message='Email invalide.')],
    )
    display_name = StringField('Nom affiché', validators=[DataRequired(message='Choisis un nom.'), Length(max=120)])
    password = PasswordField(
        'Mot de passe',
        validators=[DataRequired(message='Choisis un mot de passe.'), Length(min=6, message='6 caractères minimum.')],
    )
    password2 = PasswordField(
        'Confirmation',
        validators=[DataRequired(message='Confirme le mot de passe.'), EqualTo('password', message='Les mots de passe diffèrent.')],
    )

    def validate_email(self, email):
        if _email_taken(email.data):
            raise ValidationError('Cet email est déjà utilisé.')


class UserForm(FlaskForm):
    """
    Admin form to add or edit a user.
    The password is optional here; creation requires it in the view.
    """

    email = StringField('Email', validators=[DataRequired(), Regexp(EMAIL_PATTERN, message='Email invalide.')])
    display_name = StringField('Nom affiché', validators=[DataRequired(), Length(max=120)])
    password = PasswordField('Mot de passe', validators=[Optional(), Length(min=6, message='6 caractères minimum.')])
    user_role = SelectField(
        'Rôle',
        choices=[(User.ROLE_USER, 'Utilisateur'), (User.ROLE_ADMIN, 'Administrateur')],
        validators=[DataRequired()],
    )

    def validate_email(self, email_field):
        user = getattr(self, 'user', None)
        if _email_taken(email_field.data, user.user_id if user else None):
            raise ValidationError('Cet email est déjà utilisé.')
