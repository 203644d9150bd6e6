from django.urls import path
from . import views

app_name = 'authentication'

urlpatterns = [
    path('verify-token/', views.verify_token, name='verify_token'),
    path('register/', views.RegisterView.as_view(), name='register'),
    path('user/', views.AuthenticatedUserView.as_view(), name='current_user'),
]
