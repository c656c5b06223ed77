class MemberScopedQuerysetMixin:
    """
    Admins see every row and may filter with ?member=<member_no>.
    Members only see their own rows.
    """

    def get_queryset(self):
        queryset = super().get_queryset().select_related("member")
        user = self.request.user
        if user.is_superuser or user.is_system_admin:
            member_no = self.request.query_params.get("member")
            if member_no:
                queryset = queryset.filter(member__member_no=member_no)
            return queryset
        return queryset.filter(member=user)
