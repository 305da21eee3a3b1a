from django.contrib import admin
from .models import SettingKV


@admin.register(SettingKV)
class SettingKVAdmin(admin.ModelAdmin):
    list_display = ("key", "value", "updated_at")
    search_fields = ("key", "description")
