from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from django.contrib.auth.forms import ReadOnlyPasswordHashField
from django import forms
from apps.accounts.models import User


# ============================
# User Admin Forms
# ============================

class UserCreationForm(forms.ModelForm):
    """Form for creating staff users in admin."""
    password1 = forms.CharField(label='Password', widget=forms.PasswordInput)
    password2 = forms.CharField(label='Password confirmation', widget=forms.PasswordInput)

    class Meta:
        model = User
        fields = ('external_id', 'username')

    def clean_password2(self):
        password1 = self.cleaned_data.get("password1")
        password2 = self.cleaned_data.get("password2")
        if password1 and password2 and password1 != password2:
            raise forms.ValidationError("Passwords don't match")
        return password2

    def save(self, commit=True):
        user = super().save(commit=False)
        user.set_password(self.cleaned_data["password1"])
        if commit:
            user.save()
        return user


class UserChangeForm(forms.ModelForm):
    """Form for updating users in admin."""
    password = ReadOnlyPasswordHashField(label="Password")

    class Meta:
        model = User
        fields = '__all__'


# ============================
# User Admin
# ============================

@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """
    Admin for marketplace users.
    The deal counter is maintained by the ledger and is read-only here.
    """
    form = UserChangeForm
    add_form = UserCreationForm

    list_display = (
        'external_id',
        'username',
        'completed_deals',
        'is_active',
        'is_staff',
        'created_at'
    )

    list_filter = ('is_active', 'is_staff', 'is_superuser', 'card_currency')

    search_fields = ('external_id', 'username', 'messaging_handle')

    ordering = ('-created_at',)

    fieldsets = (
        (None, {'fields': ('external_id', 'username', 'password')}),
        ('Requisites', {
            'fields': ('wallet', 'card_number', 'card_bank', 'card_currency', 'messaging_handle'),
        }),
        ('Reputation', {'fields': ('completed_deals',)}),
        ('Permissions', {
            'fields': ('is_active', 'is_staff', 'is_superuser', 'groups', 'user_permissions'),
        }),
        ('Important dates', {
            'fields': ('created_at', 'updated_at', 'last_login'),
            'classes': ('collapse',),
        }),
    )

    add_fieldsets = (
        (None, {
            'classes': ('wide',),
            'fields': ('external_id', 'username', 'password1', 'password2'),
        }),
    )

    readonly_fields = ('completed_deals', 'created_at', 'updated_at', 'last_login')
