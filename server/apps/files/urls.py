from django.urls import path

from server.apps.files import views

app_name = 'files'

urlpatterns = [
    path('files', views.file_list, name='list'),
    path('files/upload', views.upload, name='upload'),
    path('files/folders/list', views.folder_list, name='folders'),
    path('files/<int:file_id>', views.file_detail, name='detail'),
    path('files/<int:file_id>/download', views.download, name='download'),
]
