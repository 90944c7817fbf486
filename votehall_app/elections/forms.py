"""Input parsing for JSON endpoints.

Forms only coerce types; the domain services own the business rules.
"""

from django import forms

from elections.exceptions import ElectionValidationError
from elections.models import Identity


class _CleanedDataMixin:
    def cleaned_or_raise(self) -> dict[str, object]:
        if not self.is_valid():
            field, messages = next(iter(self.errors.items()))
            label = "Request" if field == "__all__" else field
            raise ElectionValidationError(f"{label}: {messages[0]}")
        return dict(self.cleaned_data)


class ElectionCreateForm(_CleanedDataMixin, forms.Form):
    # Presence is checked by create_election.
    title = forms.CharField(max_length=255, required=False)
    description = forms.CharField(required=False)
    start_datetime = forms.DateTimeField(required=False)
    end_datetime = forms.DateTimeField(required=False)


class ElectionStatusForm(_CleanedDataMixin, forms.Form):
    status = forms.CharField(max_length=16)


class CandidacyApplicationForm(_CleanedDataMixin, forms.Form):
    position = forms.CharField(max_length=255)


class VoteForm(_CleanedDataMixin, forms.Form):
    candidacy_id = forms.IntegerField(min_value=1)


class RegistrationForm(_CleanedDataMixin, forms.Form):
    username = forms.CharField(max_length=150)
    email = forms.EmailField()
    password = forms.CharField(min_length=8, strip=False)
    name = forms.CharField(max_length=255)
    role = forms.ChoiceField(choices=[(Identity.Role.voter, "Voter"), (Identity.Role.candidate, "Candidate")])
    district = forms.CharField(max_length=255, required=False)
    state = forms.CharField(max_length=255, required=False)
    phone_number = forms.CharField(max_length=32, required=False)


class LoginForm(_CleanedDataMixin, forms.Form):
    username = forms.CharField(max_length=150)
    password = forms.CharField(strip=False)


class ProfileForm(_CleanedDataMixin, forms.Form):
    name = forms.CharField(max_length=255)
    phone_number = forms.CharField(max_length=32, required=False)
    district = forms.CharField(max_length=255, required=False)
    state = forms.CharField(max_length=255, required=False)
