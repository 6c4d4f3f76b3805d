import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('tenderscore', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='ScoringTemplate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, null=True)),
                ('category', models.CharField(blank=True, max_length=100, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, to=settings.AUTH_USER_MODEL)),
                ('municipality', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='scoring_templates', to='tenderscore.municipality')),
            ],
            options={
                'db_table': 'scoring_templates',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='ScoringTemplateCriteria',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('criteria_name', models.CharField(max_length=255)),
                ('criteria_category', models.CharField(choices=[('Price', 'Price'), ('BBBEE', 'B-BBEE'), ('Technical', 'Technical'), ('Experience', 'Experience'), ('Local Content', 'Local Content'), ('Quality', 'Quality')], default='Technical', max_length=50)),
                ('description', models.TextField(blank=True, null=True)),
                ('max_score', models.DecimalField(decimal_places=2, max_digits=7, validators=[django.core.validators.MinValueValidator(0)])),
                ('weight', models.DecimalField(decimal_places=2, default=1, max_digits=7, validators=[django.core.validators.MinValueValidator(0)])),
                ('sort_order', models.IntegerField(default=0)),
                ('template', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='criteria', to='tenderscore.scoringtemplate')),
            ],
            options={
                'verbose_name_plural': 'Scoring Template Criteria',
                'db_table': 'scoring_template_criteria',
                'ordering': ['template', 'sort_order', 'id'],
                'unique_together': {('template', 'criteria_name')},
            },
        ),
    ]
