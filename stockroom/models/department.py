"""
Department and Section models: where stock and services live.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class Department(models.Model):
    """
    Organizational unit that holds stock and hosts services.

    Departments are stable entities owned by admin tooling. This app only
    reads them; ``category`` lets reconciliation place surplus stock at a
    department that deals in the item's category.

    Examples:
        Department.objects.create(code='bar', name='Main Bar', category='drinks')
        Department.objects.create(code='restaurant', name='Restaurant', category='food')
    """

    code = models.SlugField(
        unique=True,
        max_length=50,
        verbose_name=_('Code'),
    )
    name = models.CharField(max_length=100, verbose_name=_('Name'))
    category = models.CharField(
        max_length=50,
        blank=True,
        default='',
        db_index=True,
        verbose_name=_('Category'),
        help_text=_('Item category this department stocks (e.g. drinks, food).'),
    )
    is_active = models.BooleanField(default=True, verbose_name=_('Active'))
    metadata = models.JSONField(default=dict, blank=True, verbose_name=_('Metadata'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Department')
        verbose_name_plural = _('Departments')
        ordering = ['code']

    def __str__(self) -> str:
        return self.name


class Section(models.Model):
    """
    Sub-area of a department (a bar counter, a pool hall, a storeroom).

    Stock held at department level has no section.
    """

    department = models.ForeignKey(
        Department,
        on_delete=models.PROTECT,
        related_name='sections',
        verbose_name=_('Department'),
    )
    code = models.SlugField(max_length=50, verbose_name=_('Code'))
    name = models.CharField(max_length=100, verbose_name=_('Name'))
    is_active = models.BooleanField(default=True, verbose_name=_('Active'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = _('Section')
        verbose_name_plural = _('Sections')
        ordering = ['department', 'code']
        constraints = [
            models.UniqueConstraint(
                fields=['department', 'code'],
                name='unique_section_code_per_department',
            ),
        ]

    @property
    def qualified_code(self) -> str:
        """Department and section code, e.g. ``bar:terrace``."""
        return f"{self.department.code}:{self.code}"

    def __str__(self) -> str:
        return f"{self.department} / {self.name}"
