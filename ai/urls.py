from django.urls import path
from . import views

app_name = 'ai'

urlpatterns = [
    path('videos/search/', views.VideoSearchView.as_view(), name='video_search'),
    path('codeforces/problems/', views.CodeforcesProblemsView.as_view(), name='codeforces_problems'),
    path('quiz/generate/', views.QuizGenerationView.as_view(), name='quiz_generate'),
]
