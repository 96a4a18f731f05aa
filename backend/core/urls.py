from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

router = DefaultRouter()
router.register(r'employees', views.EmployeeViewSet, basename='employee')
router.register(r'trucks', views.TruckViewSet, basename='truck')
router.register(r'products', views.ProductViewSet, basename='product')
router.register(r'deliveries', views.DeliveryViewSet, basename='delivery')
router.register(r'expenses', views.ExpenseViewSet, basename='expense')

urlpatterns = [
    path('auth/login/', views.LoginView.as_view()),
    path('auth/refresh/', views.RefreshTokenView.as_view()),
    path('auth/me/', views.MeView.as_view()),
    path('auth/verify/', views.VerifyTokenView.as_view()),
    path('auth/logout/', views.LogoutView.as_view()),
    path('fines/', views.FineListCreateView.as_view()),
    path('fines/<int:pk>/', views.FineDetailView.as_view()),
    path('fines/<int:pk>/payments/', views.FinePaymentsView.as_view()),
    path('payroll/current-period/', views.CurrentPeriodView.as_view()),
    path('payroll/periods/', views.PayrollPeriodListView.as_view()),
    path('payroll/process-month-end/', views.ProcessMonthEndView.as_view()),
    path('payroll/period/<int:period_id>/records/', views.PeriodRecordsView.as_view()),
    path('payroll/monthly-summary/', views.MonthlySummaryView.as_view()),
    path('audit-logs/', views.AuditLogListView.as_view()),
    path('', include(router.urls)),
]
