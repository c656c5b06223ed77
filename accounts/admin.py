from django.contrib import admin

from accounts.models import User


class UserAdmin(admin.ModelAdmin):
    list_display = ("member_no", "first_name", "last_name", "email", "is_member", "is_system_admin", "is_active")
    search_fields = ("member_no", "first_name", "last_name", "email")
    list_filter = ("is_member", "is_system_admin", "is_active", "is_approved")
    ordering = ("-created_at",)


admin.site.register(User, UserAdmin)
