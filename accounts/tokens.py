from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer


class WorkNestTokenObtainPairSerializer(TokenObtainPairSerializer):
    """Login serializer that refuses blocked accounts and embeds role claims."""

    def validate(self, attrs):
        data = super().validate(attrs)
        if not self.user.is_active or self.user.is_blocked:
            raise AuthenticationFailed("Account is blocked.")
        data["role"] = self.user.role.name
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token["role"] = user.role.name
        token["role_level"] = user.role.level
        return token
